"""
HTTP client the widget uses to talk to the chatbot API.

Every call either returns fully parsed data or raises ``FetchError``;
callers never see a partial result.
"""
import asyncio
from typing import Any, Dict, List, Optional

import aiohttp

from campus_chatbot.config import Config
from campus_chatbot.widget.state import MenuOption, ordered

CATEGORY_PATHS = {
    "main": "/main-options",
    "courses": "/courses",
    "internships": "/internships",
}


class FetchError(Exception):
    """Network failure, non-2xx status or a response outside the envelope."""

    def __init__(self, message: str, status: Optional[int] = None, error_code: Optional[str] = None):
        self.status = status
        self.error_code = error_code
        super().__init__(message)


class ChatbotApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = (base_url or Config.CHATBOT_API_URL).rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout or Config.CHATBOT_API_TIMEOUT)
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "ChatbotApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    async def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            async with self._get_session().request(method, url, json=payload) as resp:
                try:
                    body = await resp.json(content_type=None)
                except ValueError:
                    body = None
                if resp.status >= 400:
                    message = f"{method} {path} returned HTTP {resp.status}"
                    code = None
                    if isinstance(body, dict):
                        message = str(body.get("message") or message)
                        code = body.get("error_code")
                    raise FetchError(message, status=resp.status, error_code=code)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FetchError(f"{method} {path} failed: {e!r}") from e

        if not isinstance(body, dict) or body.get("status") != "success":
            raise FetchError(f"{method} {path} returned an unexpected payload", status=resp.status)
        return body

    # -------------------------------------------------------------------
    # Option store
    # -------------------------------------------------------------------

    async def get_options(self, category: str) -> List[MenuOption]:
        path = CATEGORY_PATHS.get(category)
        if path is None:
            raise FetchError(f"Unknown option category: {category}")
        body = await self._request("GET", path)
        rows = body.get("data")
        if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
            raise FetchError(f"GET {path} returned malformed option data")
        options = [MenuOption.from_payload(row, category) for row in rows]
        # rows without sort_order keep the server's order
        if all("sort_order" in row for row in rows):
            options = ordered(options)
        return options

    async def get_main_options(self) -> List[MenuOption]:
        return await self.get_options("main")

    async def get_courses(self) -> List[MenuOption]:
        return await self.get_options("courses")

    async def get_internships(self) -> List[MenuOption]:
        return await self.get_options("internships")

    async def get_contact_info(self) -> Dict[str, Any]:
        body = await self._request("GET", "/contact")
        data = body.get("data")
        if not isinstance(data, dict):
            raise FetchError("GET /contact returned malformed contact data")
        if "primary_contact" not in data:
            return dict(data)
        contact = dict(data.get("primary_contact") or {})
        for key, value in (data.get("additional_contact") or {}).items():
            contact.setdefault(key, value)
        return contact

    # -------------------------------------------------------------------
    # User registry and interaction log
    # -------------------------------------------------------------------

    async def save_user(self, name: str, email: str) -> str:
        body = await self._request("POST", "/save-user", {"name": name, "email": email})
        user_id = body.get("user_id") or (body.get("data") or {}).get("user_id")
        if not user_id:
            raise FetchError("POST /save-user returned no user_id")
        return str(user_id)

    async def log_interaction(
        self,
        interaction_type: str,
        user_email: Optional[str] = None,
        option_selected: Optional[str] = None,
        user_message: Optional[str] = None,
        bot_response: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> None:
        payload = {
            "interaction_type": interaction_type,
            "user_email": user_email,
            "option_selected": option_selected,
            "user_message": user_message,
            "bot_response": bot_response,
            "session_id": session_id,
        }
        await self._request(
            "POST", "/log-interaction", {k: v for k, v in payload.items() if v is not None}
        )
