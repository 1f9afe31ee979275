"""
Domain: Session context.

Everything the pipeline needs to know about the visitor's current page and
session is carried explicitly in a SessionContext value. No component reads
ambient state (current URL, language, clock, brand); callers pass the
context through.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Optional
from urllib.parse import parse_qs, urlsplit

from .time import require_utc_timestamp, utc_now

DEFAULT_OWNER_NAME = "Owner"


@dataclass(frozen=True, slots=True)
class SessionContext:
    """
    Immutable snapshot of the visitor's page and session.

    page_url may be a full URL or a path with an optional query string
    ("/pricing?utm_source=google"). viewport_width is the CSS pixel width of
    the visitor's viewport when known.
    """

    page_url: str = "/"
    referrer: str = ""
    locale: str = ""
    timezone: str = ""
    viewport_width: Optional[int] = None
    language: str = "en"
    owner_name: str = DEFAULT_OWNER_NAME
    clock: Callable[[], datetime] = field(default=utc_now, compare=False, repr=False)

    @property
    def path(self) -> str:
        return urlsplit(self.page_url).path or "/"

    @property
    def query_string(self) -> str:
        return urlsplit(self.page_url).query

    @property
    def landing_page(self) -> str:
        """Path plus `?query` when the page was opened with one."""

        query = self.query_string
        return f"{self.path}?{query}" if query else self.path

    def query_params(self) -> Dict[str, str]:
        """First value of every query parameter; blank values are kept as ''."""

        parsed = parse_qs(self.query_string, keep_blank_values=True)
        return {key: values[0] for key, values in parsed.items() if values}

    def now(self) -> datetime:
        value = self.clock()
        require_utc_timestamp("now", value)
        return value


__all__ = ["DEFAULT_OWNER_NAME", "SessionContext"]
