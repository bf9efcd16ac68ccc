"""Watson Conversation bindings."""

from watson_client.conversation.v1 import ConversationV1

__all__ = ["ConversationV1"]
