"""
Input validation and sanitization shared by the API and the widget.
"""
import html
import re

# Same pattern the widget's identity form enforces before any network call.
WIDGET_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Stricter server-side check: a single @, dotted domain, no spaces.
_SERVER_EMAIL_RE = re.compile(
    r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)+$"
)


def sanitize_input(value, max_length: int = 1000) -> str:
    """Trim, strip backslashes and HTML-escape a user-supplied value."""
    if value is None:
        return ""
    text = str(value).strip()[:max_length]
    text = text.replace("\\", "")
    return html.escape(text, quote=True)


def is_valid_widget_email(email: str) -> bool:
    return bool(WIDGET_EMAIL_RE.match(str(email or "")))


def validate_email(email: str) -> bool:
    """Server-side email check used before touching the user registry."""
    candidate = str(email or "").strip()
    if not candidate or len(candidate) > 254:
        return False
    if candidate.count("@") != 1:
        return False
    local = candidate.partition("@")[0]
    if not local or len(local) > 64 or ".." in candidate:
        return False
    return bool(_SERVER_EMAIL_RE.match(candidate))
