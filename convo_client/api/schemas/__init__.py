from convo_client.api.schemas.agents import Agent
from convo_client.api.schemas.chat import ChatRequest, PriorMessage, Sender
from convo_client.api.schemas.stream import StreamEvent

__all__ = [
    "Agent",
    "ChatRequest",
    "PriorMessage",
    "Sender",
    "StreamEvent",
]
