"""
Pagination helpers shared by template search and experiment listing.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Generic, List, Tuple, TypeVar

T = TypeVar("T")

# Largest value SQLite accepts as an INTEGER parameter
MAX_OFFSET = 2 ** 63 - 1


def _to_int(value: Any) -> int:
    """Parse a pagination argument; 0 when missing or not numeric."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        pass
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0


def clamp_pagination(offset: Any, limit: Any, default_limit: int, max_limit: int) -> Tuple[int, int]:
    """
    Normalize offset/limit arguments.

    offset is clamped to [0, MAX_OFFSET]. limit falls back to default_limit
    when missing, zero or not numeric, and is then clamped to [1, max_limit].
    """
    clean_offset = min(MAX_OFFSET, max(0, _to_int(offset)))
    clean_limit = _to_int(limit) or default_limit
    clean_limit = min(max_limit, max(1, clean_limit))
    return clean_offset, clean_limit


@dataclass
class Page(Generic[T]):
    """One page of results plus the size of the full result set"""
    items: List[T] = field(default_factory=list)
    total_count: int = 0
    offset: int = 0
    limit: int = 1

    @property
    def current_page(self) -> int:
        return self.offset // self.limit + 1

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.limit)

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total_count

    @property
    def next_offset(self) -> int:
        return self.offset + self.limit

    @property
    def first_index(self) -> int:
        return self.offset + 1

    @property
    def last_index(self) -> int:
        return self.offset + len(self.items)
