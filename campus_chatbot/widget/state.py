"""
Conversation state for one widget session.

A session walks AWAITING_IDENTITY -> MAIN_MENU -> CATEGORY_MENU -> DETAIL_VIEW,
with IDLE while the widget is closed. All of it lives in one
``ConversationSession`` owned by the controller.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from campus_chatbot.utils.validation import is_valid_widget_email


class Phase(str, Enum):
    AWAITING_IDENTITY = "awaiting_identity"
    MAIN_MENU = "main_menu"
    CATEGORY_MENU = "category_menu"
    DETAIL_VIEW = "detail_view"
    IDLE = "idle"


class OptionKind(str, Enum):
    COURSES = "courses"
    INTERNSHIPS = "internships"
    CONTACT = "contact"
    LEAF = "leaf"


# Main-menu ids that open something other than a detail view.
_MAIN_MENU_KINDS = {
    "courses": OptionKind.COURSES,
    "internships": OptionKind.INTERNSHIPS,
    "contact": OptionKind.CONTACT,
}


def resolve_kind(option_id: str, category: str) -> OptionKind:
    if category == "main":
        return _MAIN_MENU_KINDS.get(str(option_id), OptionKind.LEAF)
    return OptionKind.LEAF


@dataclass(frozen=True)
class MenuOption:
    id: str
    text: str
    category: str = "main"
    kind: OptionKind = OptionKind.LEAF
    response_text: Optional[str] = None
    link: Optional[str] = None
    sort_order: int = 0

    @classmethod
    def from_payload(cls, data: Dict[str, Any], category: str) -> "MenuOption":
        option_id = str(data.get("id") or "")
        return cls(
            id=option_id,
            text=str(data.get("text") or ""),
            category=category,
            kind=resolve_kind(option_id, category),
            response_text=data.get("response_text") or None,
            link=data.get("link") or None,
            sort_order=int(data.get("sort_order") or 0),
        )

    @property
    def sort_key(self):
        return (self.sort_order, self.text)


def ordered(options: List[MenuOption]) -> List[MenuOption]:
    return sorted(options, key=lambda option: option.sort_key)


@dataclass(frozen=True)
class ChatMessage:
    role: str  # 'bot' or 'user'
    content: str
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class SessionIdentity:
    name: str
    email: str

    @property
    def is_valid(self) -> bool:
        return bool(self.name) and bool(self.email) and is_valid_widget_email(self.email)


@dataclass
class ConversationSession:
    session_id: str
    phase: Phase = Phase.AWAITING_IDENTITY
    category: Optional[str] = None
    identity: Optional[SessionIdentity] = None
    messages: List[ChatMessage] = field(default_factory=list)
    options: List[MenuOption] = field(default_factory=list)
    is_open: bool = False
    resume_phase: Optional[Phase] = None
    resume_category: Optional[str] = None

    def enter(self, phase: Phase, category: Optional[str] = None) -> None:
        self.phase = phase
        self.category = category

    def add_bot_message(self, content: str) -> None:
        self.messages.append(ChatMessage(role="bot", content=content))

    def add_user_message(self, content: str) -> None:
        self.messages.append(ChatMessage(role="user", content=content))
