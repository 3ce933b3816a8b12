"""Page/limit resolution for list endpoints.

Never fails: anything non-numeric or out of range falls back to the defaults.
"""

from dataclasses import dataclass

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100
# Largest page whose offset still fits a signed 64-bit OFFSET
MAX_PAGE = (2**63 - 1) // MAX_LIMIT


@dataclass(frozen=True, slots=True)
class PageRequest:
    """Resolved pagination for a single request."""

    page: int
    limit: int

    @property
    def offset(self) -> int:
        """Number of rows to skip (0 for page 1)."""
        return (self.page - 1) * self.limit


def _parse_int(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def resolve_pagination(page: str | None, limit: str | None) -> PageRequest:
    """Turn raw ``page``/``limit`` query values into a PageRequest.

    - page outside [1, MAX_PAGE] or non-numeric → DEFAULT_PAGE
    - limit outside [1, MAX_LIMIT] or non-numeric → DEFAULT_LIMIT
    """
    resolved_page = _parse_int(page)
    if resolved_page is None or not 1 <= resolved_page <= MAX_PAGE:
        resolved_page = DEFAULT_PAGE

    resolved_limit = _parse_int(limit)
    if resolved_limit is None or not 1 <= resolved_limit <= MAX_LIMIT:
        resolved_limit = DEFAULT_LIMIT

    return PageRequest(page=resolved_page, limit=resolved_limit)


def total_pages(total: int, limit: int) -> int:
    """Number of pages for ``total`` rows; an empty result still has one page."""
    return max(1, -(-total // limit))
