"""Unit tests for the widget's conversation controller.

Tests:
- Identity gating (local validation, no network on rejection)
- Menu transitions and option-list replacement
- Contact as a leaf action
- Restart semantics
- Fetch failures and stale responses
- Best-effort interaction logging

Run: pytest tests/test_conversation_controller.py -v
"""

import asyncio

import pytest

from campus_chatbot.widget.client import FetchError
from campus_chatbot.widget.controller import ConversationController, format_contact
from campus_chatbot.widget.state import MenuOption, OptionKind, Phase

MAIN = [
    MenuOption.from_payload({"id": "courses", "text": "Courses", "sort_order": 1}, "main"),
    MenuOption.from_payload({"id": "internships", "text": "Internships", "sort_order": 2}, "main"),
    MenuOption.from_payload({"id": "contact", "text": "Contact", "sort_order": 3}, "main"),
]
COURSES = [MenuOption.from_payload({"id": "c1", "text": "AI", "link": "http://x/ai"}, "courses")]
INTERNSHIPS = [
    MenuOption.from_payload({"id": "i1", "text": "Data", "link": "http://x/data"}, "internships"),
]


class FakeClient:
    """Records every call; individual methods can be made to fail or block."""

    def __init__(self):
        self.calls = []
        self.logged = []
        self.fail = set()
        self.gates = {}

    async def _answer(self, name, value):
        self.calls.append(name)
        gate = self.gates.get(name)
        if gate is not None:
            await gate.wait()
        if name in self.fail:
            raise FetchError(f"{name} failed", status=500)
        return value

    async def save_user(self, name, email):
        return await self._answer("save_user", "user-1")

    async def get_main_options(self):
        return await self._answer("main", list(MAIN))

    async def get_options(self, category):
        values = {"main": MAIN, "courses": COURSES, "internships": INTERNSHIPS}
        return await self._answer(category, list(values[category]))

    async def get_contact_info(self):
        return await self._answer("contact", {"phone": "+44 1", "email": "info@x.edu"})

    async def log_interaction(self, **fields):
        if "log" in self.fail:
            raise FetchError("log failed")
        self.logged.append(fields)


@pytest.fixture
def fake():
    return FakeClient()


async def _started(fake, name="Jo", email="jo@x.com"):
    controller = ConversationController(fake, session_id="sess-1")
    controller.open()
    assert await controller.submit_identity(name, email)
    return controller


def _option(controller, option_id):
    return next(o for o in controller.options if o.id == option_id)


class TestIdentityGate:
    """submit_identity validation and side effects."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "name,email",
        [("", "jo@x.com"), ("Jo", ""), ("   ", "jo@x.com"), ("Jo", "jo@x"), ("Jo", "jo x@x.com"), ("Jo", "@x.com")],
    )
    async def test_rejects_without_network(self, fake, name, email):
        controller = ConversationController(fake)
        assert await controller.submit_identity(name, email) is False
        assert controller.phase is Phase.AWAITING_IDENTITY
        assert fake.calls == []
        assert controller.messages == []

    @pytest.mark.asyncio
    async def test_greets_once_then_fetches_main(self, fake):
        controller = await _started(fake)
        assert fake.calls == ["save_user", "main"]
        assert controller.phase is Phase.MAIN_MENU
        assert len(controller.messages) == 1
        assert controller.messages[0].role == "bot"
        assert "Hello Jo!" in controller.messages[0].content
        assert [o.id for o in controller.options] == ["courses", "internships", "contact"]

    @pytest.mark.asyncio
    async def test_save_failure_keeps_identity_gate(self, fake):
        fake.fail.add("save_user")
        controller = ConversationController(fake)
        assert await controller.submit_identity("Jo", "jo@x.com") is False
        assert controller.phase is Phase.AWAITING_IDENTITY
        assert controller.state.identity is None
        assert controller.messages == []

    @pytest.mark.asyncio
    async def test_main_fetch_failure_still_enters_main_menu(self, fake):
        fake.fail.add("main")
        controller = ConversationController(fake)
        assert await controller.submit_identity("Jo", "jo@x.com")
        assert controller.phase is Phase.MAIN_MENU
        assert controller.options == []
        assert len(controller.messages) == 1


class TestMenuTransitions:
    """select_option dispatch."""

    @pytest.mark.asyncio
    async def test_course_detail_scenario(self, fake):
        controller = await _started(fake)
        await controller.select_option(_option(controller, "courses"))
        assert controller.phase is Phase.CATEGORY_MENU
        assert controller.state.category == "courses"

        await controller.select_option(_option(controller, "c1"))
        assert controller.phase is Phase.DETAIL_VIEW
        assert "http://x/ai" in controller.messages[-1].content
        assert controller.messages[-1].role == "bot"
        assert controller.options == []

    @pytest.mark.asyncio
    async def test_later_category_replaces_earlier(self, fake):
        controller = await _started(fake)
        await controller.select_option(MAIN[0])
        await controller.select_option(MAIN[1])
        assert controller.phase is Phase.CATEGORY_MENU
        assert controller.state.category == "internships"
        assert [o.id for o in controller.options] == ["i1"]

    @pytest.mark.asyncio
    async def test_user_message_recorded_before_bot_reply(self, fake):
        controller = await _started(fake)
        await controller.select_option(MAIN[0])
        roles = [(m.role, m.content) for m in controller.messages[1:]]
        assert roles[0] == ("user", "Courses")
        assert roles[1][0] == "bot"

    @pytest.mark.asyncio
    async def test_contact_is_leaf_action(self, fake):
        controller = await _started(fake)
        await controller.select_option(_option(controller, "contact"))
        assert controller.phase is Phase.MAIN_MENU
        assert "Phone: +44 1" in controller.messages[-1].content
        assert "Email: info@x.edu" in controller.messages[-1].content
        assert controller.options == []

    @pytest.mark.asyncio
    async def test_leaf_without_link_uses_response_text(self, fake):
        controller = await _started(fake)
        leaf = MenuOption(id="x", text="Open Day", category="main", response_text="Saturday at 10")
        await controller.select_option(leaf)
        assert controller.phase is Phase.DETAIL_VIEW
        assert "Saturday at 10" in controller.messages[-1].content

    @pytest.mark.asyncio
    async def test_select_before_identity_ignored(self, fake):
        controller = ConversationController(fake)
        assert await controller.select_option(MAIN[0]) is False
        assert controller.messages == []
        assert fake.calls == []


class TestRestart:
    """restart() semantics."""

    @pytest.mark.asyncio
    async def test_restart_leaves_only_greeting(self, fake):
        controller = await _started(fake)
        await controller.select_option(MAIN[0])
        await controller.select_option(COURSES[0])

        assert await controller.restart()
        assert controller.phase is Phase.MAIN_MENU
        assert len(controller.messages) == 1
        assert "Hello Jo!" in controller.messages[0].content
        assert controller.state.identity.email == "jo@x.com"
        assert [o.id for o in controller.options] == ["courses", "internships", "contact"]

    @pytest.mark.asyncio
    async def test_restart_without_identity_is_noop(self, fake):
        controller = ConversationController(fake)
        assert await controller.restart() is False
        assert controller.phase is Phase.AWAITING_IDENTITY
        assert fake.calls == []


class TestFailures:
    """Fetch failures and stale responses."""

    @pytest.mark.asyncio
    async def test_failed_category_fetch_keeps_state_and_log(self, fake):
        controller = await _started(fake)
        fake.fail.add("courses")
        await controller.select_option(MAIN[0])

        assert controller.phase is Phase.MAIN_MENU
        assert controller.options == []
        assert [m.role for m in controller.messages] == ["bot", "user"]

    @pytest.mark.asyncio
    async def test_failed_contact_fetch_appends_nothing(self, fake):
        controller = await _started(fake)
        fake.fail.add("contact")
        await controller.select_option(MAIN[2])
        assert controller.messages[-1].role == "user"
        assert controller.phase is Phase.MAIN_MENU

    @pytest.mark.asyncio
    async def test_second_select_ignored_while_loading(self, fake):
        controller = await _started(fake)
        gate = asyncio.Event()
        fake.gates["courses"] = gate

        pending = asyncio.ensure_future(controller.select_option(MAIN[0]))
        await asyncio.sleep(0)
        assert controller.busy
        assert await controller.select_option(MAIN[1]) is False

        gate.set()
        assert await pending is True
        assert controller.state.category == "courses"

    @pytest.mark.asyncio
    async def test_stale_response_after_restart_is_discarded(self, fake):
        controller = await _started(fake)
        gate = asyncio.Event()
        fake.gates["courses"] = gate

        pending = asyncio.ensure_future(controller.select_option(MAIN[0]))
        await asyncio.sleep(0)
        await controller.restart()
        gate.set()
        await pending

        assert controller.phase is Phase.MAIN_MENU
        assert [o.id for o in controller.options] == ["courses", "internships", "contact"]
        assert len(controller.messages) == 1


class TestInteractionLog:
    """Fire-and-forget interaction logging."""

    @pytest.mark.asyncio
    async def test_each_action_is_logged(self, fake):
        controller = await _started(fake)
        await controller.select_option(MAIN[0])
        await controller.select_option(COURSES[0])
        await controller.restart()
        await controller.drain()

        types = [entry["interaction_type"] for entry in fake.logged]
        assert types == ["start_chat", "option_select", "course_inquiry", "restart"]
        assert all(entry["session_id"] == "sess-1" for entry in fake.logged)
        assert fake.logged[2]["option_selected"] == "c1"
        assert fake.logged[2]["user_email"] == "jo@x.com"

    @pytest.mark.asyncio
    async def test_log_failures_never_reach_conversation(self, fake):
        fake.fail.add("log")
        controller = await _started(fake)
        await controller.select_option(MAIN[0])
        await controller.drain()
        assert controller.phase is Phase.CATEGORY_MENU
        assert fake.logged == []


class TestVisibility:
    """open()/close() never reset the conversation."""

    @pytest.mark.asyncio
    async def test_close_parks_and_open_resumes(self, fake):
        controller = await _started(fake)
        await controller.select_option(MAIN[0])
        before = controller.messages

        controller.close()
        assert controller.phase is Phase.IDLE
        assert controller.state.is_open is False

        controller.open()
        assert controller.phase is Phase.CATEGORY_MENU
        assert controller.state.category == "courses"
        assert controller.messages == before
        assert [o.id for o in controller.options] == ["c1"]

    @pytest.mark.asyncio
    async def test_fetch_landing_while_closed_waits_for_open(self, fake):
        controller = await _started(fake)
        gate = asyncio.Event()
        fake.gates["courses"] = gate

        pending = asyncio.ensure_future(controller.select_option(MAIN[0]))
        await asyncio.sleep(0)
        controller.close()
        gate.set()
        assert await pending is True

        assert controller.state.is_open is False
        assert controller.phase is Phase.IDLE

        controller.open()
        assert controller.phase is Phase.CATEGORY_MENU
        assert controller.state.category == "courses"
        assert [o.id for o in controller.options] == ["c1"]

    @pytest.mark.asyncio
    async def test_select_while_closed_is_ignored(self, fake):
        controller = await _started(fake)
        controller.close()
        before = controller.messages

        assert await controller.select_option(MAIN[0]) is False
        assert controller.phase is Phase.IDLE
        assert controller.messages == before
        assert fake.calls == ["save_user", "main"]

    def test_open_before_identity_waits_for_identity(self, fake):
        controller = ConversationController(fake)
        controller.open()
        controller.close()
        controller.open()
        assert controller.phase is Phase.AWAITING_IDENTITY


class TestOptionKinds:
    """Tagged option kinds are resolved from the fetched category."""

    def test_main_menu_kinds(self):
        assert [o.kind for o in MAIN] == [OptionKind.COURSES, OptionKind.INTERNSHIPS, OptionKind.CONTACT]

    def test_category_entries_are_leaves(self):
        course = MenuOption.from_payload({"id": "courses", "text": "Courses"}, "courses")
        assert course.kind is OptionKind.LEAF

    def test_format_contact_includes_extra_fields(self):
        text = format_contact({"phone": "1", "email": "a@b.co", "whatsapp": "2"})
        assert "Whatsapp: 2" in text
