from __future__ import annotations

from dataclasses import dataclass


class ConvoClientError(Exception):
    """Base class for failures raised by the conversation client."""


class NetworkError(ConvoClientError):
    """The request never reached the backend, or the connection broke while reading."""


@dataclass
class HttpError(ConvoClientError):
    status_code: int
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"Server responded with {self.status_code}: {self.detail}"
        return f"Server responded with {self.status_code}"


class DecodeError(ConvoClientError):
    """A stream line could not be framed as ``data: {json}``."""


class ParseError(ConvoClientError):
    """A well-framed event carried a payload that is not a JSON object."""


class InvariantViolation(ConvoClientError):
    """Transcript state does not allow the requested mutation."""


class NoAgentSelectedError(ConvoClientError):
    """A turn was requested before any agent could be selected."""
