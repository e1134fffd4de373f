from __future__ import annotations

from collections.abc import Iterable, Iterator
import copy
from dataclasses import dataclass, field, replace
import logging
from typing import Any

from convo_client.api.schemas.chat import PriorMessage, Sender
from convo_client.api.schemas.stream import StreamEvent
from convo_client.core.errors import InvariantViolation

logger = logging.getLogger(__name__)


@dataclass
class ConversationEntry:
    sender: Sender
    text: str = ""
    metadata: Any | None = None
    done: bool = False

    @property
    def is_open_reply(self) -> bool:
        return self.sender is Sender.ASSISTANT and not self.done

    @property
    def citations(self) -> list[Any]:
        if isinstance(self.metadata, dict):
            citations = self.metadata.get("citations")
            if isinstance(citations, list):
                return citations
        return []

    def to_prior_message(self) -> PriorMessage:
        return PriorMessage(sender=self.sender, text=self.text, done=self.done, search_metadata=self.metadata)


@dataclass
class Transcript:
    """Ordered conversation log; the last assistant entry grows while its turn streams."""

    entries: list[ConversationEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ConversationEntry]:
        return iter(self.entries)

    @property
    def last(self) -> ConversationEntry | None:
        return self.entries[-1] if self.entries else None

    def append_user(self, text: str) -> ConversationEntry:
        entry = ConversationEntry(sender=Sender.USER, text=text, done=True)
        self.entries.append(entry)
        return entry

    def drop_unanswered_user(self) -> ConversationEntry | None:
        """Remove a trailing user entry that never got a reply, keeping the log alternating."""

        last = self.last
        if last is None or last.sender is not Sender.USER:
            return None
        return self.entries.pop()

    def prior_messages(self) -> list[PriorMessage]:
        """History sent with a request: everything except the just-submitted entry."""

        return [entry.to_prior_message() for entry in self.entries[:-1]]

    def snapshot(self) -> tuple[ConversationEntry, ...]:
        return tuple(replace(entry, metadata=copy.deepcopy(entry.metadata)) for entry in self.entries)


def merge_event(transcript: Transcript, event: StreamEvent) -> Transcript:
    """Fold one stream event into the transcript, in place, and return it."""

    last = transcript.last
    if last is None:
        raise InvariantViolation("cannot merge a reply into an empty transcript")

    if last.is_open_reply:
        if event.text_content:
            last.text += event.text_content
        entry = last
    else:
        entry = ConversationEntry(sender=Sender.ASSISTANT, text=event.text_content or "")
        transcript.entries.append(entry)

    if event.is_final:
        entry.metadata = event.search_metadata
        entry.done = True
        logger.debug("assistant reply completed", extra={"reply_length": len(entry.text)})
    return transcript


def merge_events(transcript: Transcript, events: Iterable[StreamEvent]) -> Transcript:
    for event in events:
        merge_event(transcript, event)
    return transcript
