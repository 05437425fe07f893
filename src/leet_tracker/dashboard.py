"""Progress statistics for the dashboard and analytics views."""
from datetime import date, timedelta

from leet_tracker.models import PatternStats, ProblemStats, Status, percentage
from leet_tracker.schedule import is_review_due, next_review_date


def mastery_rate(total: int, mastered: int) -> int:
    return percentage(mastered, total)


def get_mastery_label(rate: float) -> str:
    if rate >= 80:
        return "MASTERED"
    elif rate >= 50:
        return "SOLID"
    elif rate >= 25:
        return "IN PROGRESS"
    return "JUST STARTED"


def get_mastery_color(rate: float) -> str:
    if rate >= 80:
        return "green"
    elif rate >= 50:
        return "yellow"
    elif rate >= 25:
        return "dark_orange"
    return "red"


def difficulty_breakdown(stats: ProblemStats) -> list[dict]:
    rows = [
        ("Easy", stats.easy_count),
        ("Medium", stats.medium_count),
        ("Hard", stats.hard_count),
    ]
    return [
        {"difficulty": name, "count": count, "percentage": percentage(count, stats.total_problems)}
        for name, count in rows
    ]


def status_breakdown(stats: ProblemStats) -> list[dict]:
    rows = [
        (Status.NEW, stats.new_count),
        (Status.FIRST_REVIEW, stats.first_review_count),
        (Status.SECOND_REVIEW, stats.second_review_count),
        (Status.MASTERED, stats.mastered_count),
    ]
    return [
        {"status": status.label, "count": count, "percentage": percentage(count, stats.total_problems)}
        for status, count in rows
    ]


def in_progress_count(stats: ProblemStats) -> int:
    return stats.first_review_count + stats.second_review_count


def pattern_tags(pattern: str) -> list[str]:
    """A pattern field may hold several space-separated tags."""
    return [tag for tag in (pattern or "").split() if tag]


def pattern_stats(problems: list) -> list[PatternStats]:
    """Per-tag counts, most practised first (ties by name)."""
    by_tag: dict[str, PatternStats] = {}
    for problem in problems:
        for tag in pattern_tags(problem.pattern):
            entry = by_tag.setdefault(tag, PatternStats(pattern=tag))
            entry.count += 1
            entry.problem_ids.append(problem.id)
            if problem.status == Status.MASTERED:
                entry.mastered += 1
    return sorted(by_tag.values(), key=lambda s: (-s.count, s.pattern.casefold()))


def calculate_streak(problems: list, today: date | None = None) -> int:
    """Consecutive days, ending today, with at least one attempted problem."""
    if today is None:
        today = date.today()
    days = {p.date_attempted for p in problems if p.date_attempted}
    streak = 0
    current = today
    while current in days:
        streak += 1
        current -= timedelta(days=1)
    return streak


def due_problems(problems: list, today: date | None = None) -> list:
    """Local review queue: everything due, oldest due date first."""
    due = [p for p in problems if is_review_due(p, today)]
    return sorted(due, key=next_review_date)


def upcoming_reviews(problems: list, today: date | None = None, days: int = 7) -> list[dict]:
    """Scheduled (not yet due) reviews within the next `days` days."""
    if today is None:
        today = date.today()
    horizon = today + timedelta(days=days)
    rows = []
    for problem in problems:
        due = next_review_date(problem)
        if due is not None and today < due <= horizon:
            rows.append({"problem": problem, "due": due, "in_days": (due - today).days})
    return sorted(rows, key=lambda r: r["due"])
