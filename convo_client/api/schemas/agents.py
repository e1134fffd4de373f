from pydantic import BaseModel, ConfigDict, Field


class Agent(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    id: int = Field(..., description="Server-side agent identifier used in chat URLs")
    name: str = Field(..., alias="agent_name", description="Human-readable agent name shown in the selector")
