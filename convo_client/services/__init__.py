"""Conversation services: stream decoding, transcript merging, and turn orchestration."""

from convo_client.services.agent_registry import AgentRegistry
from convo_client.services.backend_client import ConvoBackendClient
from convo_client.services.transcript import ConversationEntry, Transcript, merge_event
from convo_client.services.turn_controller import ConversationSnapshot, TurnController, TurnState

__all__ = [
    "AgentRegistry",
    "ConversationEntry",
    "ConversationSnapshot",
    "ConvoBackendClient",
    "Transcript",
    "TurnController",
    "TurnState",
    "merge_event",
]
