from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class StreamEvent(BaseModel):
    """One decoded server event: a text delta, the final metadata, or both."""

    model_config = ConfigDict(extra="ignore")

    text_content: str | None = Field(default=None, description="Incremental assistant text fragment")
    search_metadata: Any | None = Field(default=None, description="Search results/citations; marks the reply complete")

    @property
    def has_text(self) -> bool:
        return bool(self.text_content)

    @property
    def is_final(self) -> bool:
        # Any object or array counts, even an empty one; scalars must be truthy.
        if isinstance(self.search_metadata, (dict, list)):
            return True
        return bool(self.search_metadata)

    @property
    def is_meaningful(self) -> bool:
        return self.has_text or self.is_final
