from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Sender(str, Enum):
    USER = "human"
    ASSISTANT = "ai"


class PriorMessage(BaseModel):
    sender: Sender = Field(..., description="Author of the message; history must alternate human/ai")
    text: str = Field(..., description="Full message text as shown in the transcript")
    done: bool = Field(..., description="False when the reply never received its final metadata event")
    search_metadata: Any | None = Field(default=None, description="Citations attached to a completed reply")


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: str = Field(..., min_length=1, description="User message for the current turn")
    stream: bool = Field(default=True, description="Always true; the client only consumes streamed replies")
    prev_msgs: list[PriorMessage] = Field(
        default_factory=list,
        alias="prevMsgs",
        description="Conversation history preceding the current user message",
    )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
