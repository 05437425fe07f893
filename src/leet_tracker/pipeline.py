"""Filter, sort and paginate the in-memory problem list.

Every function here is pure: the input list is never mutated and the same
configuration over the same input always produces the same page.
"""
import math
from dataclasses import dataclass, replace
from datetime import date

from leet_tracker.models import Difficulty, Problem, Status

ALL = "all"
PAGE_SIZE = 10
SORT_FIELDS = ("problem_number", "title", "difficulty", "status", "pattern", "date_attempted")
SORT_ORDERS = ("asc", "desc")


@dataclass(frozen=True)
class ListConfig:
    search_term: str = ""
    difficulty: str = ALL
    status: str = ALL
    pattern: str = ALL
    sort_by: str = "date_attempted"
    sort_order: str = "desc"
    page_size: int = PAGE_SIZE
    current_page: int = 1

    def __post_init__(self):
        if self.page_size < 1:
            raise ValueError(f"Page size must be at least 1, got {self.page_size}")

    def with_filters(self, **changes) -> "ListConfig":
        """Apply filter changes and go back to the first page."""
        return replace(self, current_page=1, **changes)

    def cleared(self) -> "ListConfig":
        return replace(
            self, search_term="", difficulty=ALL, status=ALL, pattern=ALL, current_page=1,
        )


@dataclass(frozen=True)
class Page:
    items: tuple
    total_items: int
    filtered_count: int
    total_pages: int
    current_page: int
    page_size: int = PAGE_SIZE

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages


def _is_wildcard(value) -> bool:
    return value is None or value == "" or (isinstance(value, str) and value.lower() == ALL)


def matches_search(problem: Problem, term: str) -> bool:
    if not term:
        return True
    needle = term.lower()
    haystacks = (problem.title, str(problem.problem_number), problem.pattern, problem.notes or "")
    return any(needle in text.lower() for text in haystacks)


def filter_problems(problems, config: ListConfig) -> list:
    """Keep the problems matching every active filter."""
    difficulty = None if _is_wildcard(config.difficulty) else Difficulty.parse(config.difficulty)
    status = None if _is_wildcard(config.status) else Status.parse(config.status)
    pattern = None if _is_wildcard(config.pattern) else config.pattern

    result = []
    for problem in problems:
        if not matches_search(problem, config.search_term):
            continue
        if difficulty is not None and problem.difficulty != difficulty:
            continue
        if status is not None and problem.status != status:
            continue
        if pattern is not None and problem.pattern != pattern:
            continue
        result.append(problem)
    return result


def _sort_key(sort_by: str):
    if sort_by in ("title", "pattern"):
        return lambda p: getattr(p, sort_by).casefold()
    if sort_by in ("difficulty", "status"):
        return lambda p: int(getattr(p, sort_by))
    if sort_by == "date_attempted":
        return lambda p: p.date_attempted or date.min
    return lambda p: p.problem_number


def sort_problems(problems, sort_by: str = "date_attempted", sort_order: str = "desc") -> list:
    """Stable sort; equal keys keep their input order in both directions."""
    if sort_by not in SORT_FIELDS:
        raise ValueError(f"Cannot sort by {sort_by!r}")
    if sort_order not in SORT_ORDERS:
        raise ValueError(f"Invalid sort order {sort_order!r}")
    # reverse=True in sorted() keeps equal elements in original order
    return sorted(problems, key=_sort_key(sort_by), reverse=sort_order == "desc")


def total_pages(count: int, page_size: int = PAGE_SIZE) -> int:
    return max(1, math.ceil(count / page_size))


def paginate(problems, current_page: int, page_size: int = PAGE_SIZE) -> list:
    """Slice one page. Out-of-range pages come back empty; callers clamp."""
    start = (current_page - 1) * page_size
    if start < 0:
        return []
    return list(problems[start:start + page_size])


def clamp_page(config: ListConfig, filtered_count: int) -> ListConfig:
    page = min(max(1, config.current_page), total_pages(filtered_count, config.page_size))
    if page == config.current_page:
        return config
    return replace(config, current_page=page)


def run_pipeline(problems, config: ListConfig) -> Page:
    """Filter, sort, then slice the requested page."""
    filtered = filter_problems(problems, config)
    ordered = sort_problems(filtered, config.sort_by, config.sort_order)
    return Page(
        items=tuple(paginate(ordered, config.current_page, config.page_size)),
        total_items=len(problems),
        filtered_count=len(filtered),
        total_pages=total_pages(len(filtered), config.page_size),
        current_page=config.current_page,
        page_size=config.page_size,
    )


def distinct_patterns(problems) -> list:
    return sorted({p.pattern for p in problems if p.pattern}, key=str.casefold)
