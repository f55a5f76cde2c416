from campus_chatbot.widget.client import ChatbotApiClient, FetchError
from campus_chatbot.widget.controller import ConversationController, ValidationError
from campus_chatbot.widget.state import (
    ChatMessage,
    ConversationSession,
    MenuOption,
    OptionKind,
    Phase,
    SessionIdentity,
)

__all__ = [
    "ChatbotApiClient",
    "ChatMessage",
    "ConversationController",
    "ConversationSession",
    "FetchError",
    "MenuOption",
    "OptionKind",
    "Phase",
    "SessionIdentity",
    "ValidationError",
]
