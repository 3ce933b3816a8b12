"""Sort token resolution.

Only whitelisted fields can reach ORDER BY; anything else gets the default
(newest first).
"""

from dataclasses import dataclass
from enum import StrEnum


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"


# Public sort token → Product attribute name
SORTABLE_FIELDS: dict[str, str] = {
    "price": "price",
    "createdAt": "created_at",
    "rating": "rating",
    "name": "name",
}


@dataclass(frozen=True, slots=True)
class SortSpec:
    field: str
    direction: SortDirection


DEFAULT_SORT = SortSpec(field="created_at", direction=SortDirection.DESC)


def resolve_sort(token: str | None) -> SortSpec:
    """Map a sort token like ``-price`` or ``rating`` to a SortSpec.

    A leading ``-`` means descending. Unknown fields, empty tokens and a
    missing token all resolve to DEFAULT_SORT.
    """
    if not token:
        return DEFAULT_SORT

    token = str(token).strip()
    direction = SortDirection.DESC if token.startswith("-") else SortDirection.ASC
    field = SORTABLE_FIELDS.get(token.removeprefix("-"))
    if field is None:
        return DEFAULT_SORT

    return SortSpec(field=field, direction=direction)
