"""
Conversation controller for the chatbot widget.

Drives one session through the menu tree:

    AWAITING_IDENTITY --submit_identity--> MAIN_MENU
    MAIN_MENU --courses/internships--> CATEGORY_MENU(category)
    MAIN_MENU --contact--> MAIN_MENU
    CATEGORY_MENU --leaf--> DETAIL_VIEW
    any --restart--> MAIN_MENU (once identity is known)

Option lists are fetched on every transition. A failed fetch is logged and
leaves the state untouched; nothing is written into the message log for it.
Interaction-log writes run as background tasks and their failures are
dropped.
"""
import asyncio
import secrets
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

from campus_chatbot.utils.logging_utils import get_logger
from campus_chatbot.widget.client import FetchError
from campus_chatbot.widget.state import (
    ConversationSession,
    MenuOption,
    OptionKind,
    Phase,
    SessionIdentity,
)

logger = get_logger("widget")

CATEGORY_INTROS = {
    "courses": "Great! Here are our available courses:",
    "internships": "Excellent! Here are our internship opportunities:",
}

LEAF_INTERACTION_TYPES = {
    "courses": "course_inquiry",
    "internships": "internship_inquiry",
}


class ValidationError(ValueError):
    """Identity form input rejected before any network call."""


def greeting_for(identity: SessionIdentity) -> str:
    return f"Hello {identity.name}! 👋\nHey there! Please select an option to get started."


def format_contact(contact: Dict[str, Any]) -> str:
    lines = ["Contact Information"]
    labels = {"phone": "Phone", "email": "Email", "address": "Address", "hours": "Hours"}
    for key, label in labels.items():
        if contact.get(key):
            lines.append(f"{label}: {contact[key]}")
    for key, value in contact.items():
        if key not in labels and value:
            lines.append(f"{key.replace('_', ' ').title()}: {value}")
    return "\n".join(lines)


def format_detail(option: MenuOption) -> str:
    title = option.text
    if option.category == "internships":
        title = f"{option.text} Internship"
    lines = [title]
    if option.response_text:
        lines.append(option.response_text)
    if option.link:
        lines.append(f"More details: {option.link}")
    elif not option.response_text:
        lines.append("More details will be available soon.")
    return "\n".join(lines)


def validate_identity(name: str, email: str) -> SessionIdentity:
    identity = SessionIdentity(name=str(name or "").strip(), email=str(email or "").strip())
    if not identity.name or not identity.email:
        raise ValidationError("Name and email are required")
    if not identity.is_valid:
        raise ValidationError("Please enter a valid email address")
    return identity


class ConversationController:
    def __init__(self, client, session_id: Optional[str] = None):
        self.client = client
        self.state = ConversationSession(session_id=session_id or secrets.token_hex(8))
        self._generation = 0
        self._busy_generation: Optional[int] = None
        self._log_tasks: Set[asyncio.Task] = set()

    # -------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def messages(self):
        return list(self.state.messages)

    @property
    def options(self) -> List[MenuOption]:
        return list(self.state.options)

    @property
    def busy(self) -> bool:
        return self._busy_generation == self._generation

    # -------------------------------------------------------------------
    # Visibility
    # -------------------------------------------------------------------

    def open(self) -> None:
        if self.state.is_open:
            return
        self.state.is_open = True
        if self.state.phase is Phase.IDLE:
            resume = self.state.resume_phase
            if resume is None:
                resume = Phase.MAIN_MENU if self.state.identity else Phase.AWAITING_IDENTITY
            self.state.enter(resume, self.state.resume_category)

    def close(self) -> None:
        if not self.state.is_open:
            return
        self.state.is_open = False
        if self.state.phase is not Phase.IDLE:
            self.state.resume_phase = self.state.phase
            self.state.resume_category = self.state.category
            self.state.enter(Phase.IDLE)

    # -------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------

    async def submit_identity(self, name: str, email: str) -> bool:
        """Accept the identity form; False when it was rejected or not saved."""
        if self.state.identity is not None:
            return False
        try:
            identity = validate_identity(name, email)
        except ValidationError as e:
            logger.debug(f"Identity rejected: {e}")
            return False

        generation = self._begin()
        try:
            await self.client.save_user(identity.name, identity.email)
        except FetchError as e:
            logger.warning(f"Could not save identity: {e}")
            return False
        finally:
            self._finish(generation)

        if generation != self._generation:
            return False

        self.state.identity = identity
        self.state.add_bot_message(greeting_for(identity))
        self._move_to(Phase.MAIN_MENU)
        self._log("start_chat")
        await self._show_main_options()
        return True

    async def select_option(self, option: MenuOption) -> bool:
        """Handle a click on one of the displayed options.

        Returns False when the click was ignored (no identity yet, the widget
        is closed, or the previous transition is still loading).
        """
        if self.state.identity is None or self.busy or self.phase is Phase.IDLE:
            return False

        self.state.add_user_message(option.text)
        self.state.options = []

        if option.kind is OptionKind.COURSES or option.kind is OptionKind.INTERNSHIPS:
            category = option.kind.value
            self._log("option_select", option)
            await self._show_category(category)
        elif option.kind is OptionKind.CONTACT:
            self._log("contact_request", option)
            await self._show_contact()
        else:
            message = format_detail(option)
            self.state.add_bot_message(message)
            self._move_to(Phase.DETAIL_VIEW, option.category)
            self._log(LEAF_INTERACTION_TYPES.get(option.category, "option_select"), option, message)
        return True

    async def restart(self) -> bool:
        identity = self.state.identity
        if identity is None:
            return False
        self._generation += 1
        self.state.messages = []
        self.state.options = []
        self.state.add_bot_message(greeting_for(identity))
        self._move_to(Phase.MAIN_MENU)
        self._log("restart")
        await self._show_main_options()
        return True

    # -------------------------------------------------------------------
    # Fetch helpers
    # -------------------------------------------------------------------

    def _move_to(self, phase: Phase, category: Optional[str] = None) -> None:
        """Enter ``phase``, or record it as the resume target while closed."""
        if self.state.phase is Phase.IDLE:
            self.state.resume_phase = phase
            self.state.resume_category = category
            return
        self.state.enter(phase, category)

    def _begin(self) -> int:
        self._generation += 1
        self._busy_generation = self._generation
        return self._generation

    def _finish(self, generation: int) -> None:
        if self._busy_generation == generation:
            self._busy_generation = None

    async def _load(self, what: str, fetch: Callable[[], Awaitable[Any]]):
        """Run ``fetch`` for the current transition.

        Returns ``(True, result)`` on success and ``(False, None)`` when the
        fetch failed or the session moved on while it was in flight.
        """
        generation = self._begin()
        try:
            result = await fetch()
        except FetchError as e:
            logger.warning(f"Failed to load {what}: {e}")
            return False, None
        finally:
            self._finish(generation)

        if generation != self._generation:
            logger.debug(f"Discarding stale {what} response")
            return False, None
        return True, result

    async def _show_main_options(self) -> None:
        ok, options = await self._load("main options", self.client.get_main_options)
        if ok:
            self.state.options = list(options)

    async def _show_category(self, category: str) -> None:
        ok, options = await self._load(category, lambda: self.client.get_options(category))
        if not ok:
            return
        self.state.add_bot_message(CATEGORY_INTROS[category])
        self.state.options = list(options)
        self._move_to(Phase.CATEGORY_MENU, category)

    async def _show_contact(self) -> None:
        ok, contact = await self._load("contact information", self.client.get_contact_info)
        if ok:
            self.state.add_bot_message(format_contact(contact))

    # -------------------------------------------------------------------
    # Interaction log
    # -------------------------------------------------------------------

    def _log(
        self,
        interaction_type: str,
        option: Optional[MenuOption] = None,
        bot_response: Optional[str] = None,
    ) -> None:
        identity = self.state.identity
        try:
            task = asyncio.ensure_future(self.client.log_interaction(
                interaction_type=interaction_type,
                user_email=identity.email if identity else None,
                option_selected=option.id if option else None,
                user_message=option.text if option else None,
                bot_response=bot_response,
                session_id=self.state.session_id,
            ))
        except Exception as e:
            logger.debug(f"Interaction log write dropped: {e!r}")
            return
        self._log_tasks.add(task)
        task.add_done_callback(self._log_done)

    def _log_done(self, task: asyncio.Task) -> None:
        self._log_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.debug(f"Interaction log write dropped: {error!r}")

    async def drain(self) -> None:
        """Wait for pending interaction-log writes (used on shutdown)."""
        if self._log_tasks:
            await asyncio.gather(*list(self._log_tasks), return_exceptions=True)
