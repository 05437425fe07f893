"""Fixed-offset review schedule and status transitions."""
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional

from leet_tracker.errors import InvalidTransition
from leet_tracker.models import Problem, Status

# status -> (anchor field, days until the next review)
REVIEW_OFFSETS = {
    Status.NEW: ("date_attempted", 3),
    Status.FIRST_REVIEW: ("first_review_date", 7),
    Status.SECOND_REVIEW: ("second_review_date", 20),
}

# review-date field stamped when a problem leaves each status
STAMP_FIELDS = {
    Status.NEW: "first_review_date",
    Status.FIRST_REVIEW: "second_review_date",
    Status.SECOND_REVIEW: "final_review_date",
}

ADVANCE_ENDPOINTS = {
    Status.NEW: "first-review",
    Status.FIRST_REVIEW: "second-review",
    Status.SECOND_REVIEW: "master-review",
}


def _as_date(value) -> date:
    if isinstance(value, datetime):
        # aware timestamps count in the caller's local zone
        return (value.astimezone() if value.tzinfo else value).date()
    return value


def next_review_date(problem: Problem) -> Optional[date]:
    """Return the date the problem is next due, or None if unscheduled.

    None is not an error: it means the problem is mastered or the anchor
    date for its current status has not been recorded yet.
    """
    rule = REVIEW_OFFSETS.get(problem.status)
    if rule is None:
        return None
    anchor_field, days = rule
    anchor = getattr(problem, anchor_field)
    if anchor is None:
        return None
    return _as_date(anchor) + timedelta(days=days)


def is_review_due(problem: Problem, today=None) -> bool:
    """True when the next review falls on or before today's calendar date."""
    due = next_review_date(problem)
    if due is None:
        return False
    if today is None:
        today = date.today()
    return due <= _as_date(today)


def review_state(problem: Problem, today=None) -> str:
    if problem.status == Status.MASTERED:
        return "Mastered"
    return "Due" if is_review_due(problem, today) else "Scheduled"


def advance_status(status: Status) -> Status:
    """Move one stage forward. Mastered is terminal and raises."""
    status = Status.parse(status)
    if status == Status.MASTERED:
        raise InvalidTransition(status, "Problem is already mastered.")
    return Status(status + 1)


def reset_status(status: Status) -> Status:
    """Move one stage back, staying at New once there."""
    status = Status.parse(status)
    return Status(max(Status.NEW, status - 1))


def review_endpoint(status: Status) -> str:
    status = Status.parse(status)
    if status not in ADVANCE_ENDPOINTS:
        raise InvalidTransition(status, "Problem is already mastered.")
    return ADVANCE_ENDPOINTS[status]


def stamp_review(problem: Problem, when=None) -> Problem:
    """Copy of the problem advanced one stage, with its review date written once."""
    new_status = advance_status(problem.status)
    stamp_field = STAMP_FIELDS[problem.status]
    changes = {"status": new_status}
    if getattr(problem, stamp_field) is None:
        changes[stamp_field] = _as_date(when) if when is not None else date.today()
    return replace(problem, **changes)


def unstamp_review(problem: Problem) -> Problem:
    """Copy of the problem moved back one stage. Review dates are kept."""
    return replace(problem, status=reset_status(problem.status))
