"""Data classes for the problem tracker domain model."""
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import IntEnum
from typing import Optional


class _LabelledEnum(IntEnum):
    @classmethod
    def parse(cls, value):
        """Convert a wire value (ordinal, enum name or display label) to a member."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        if isinstance(value, str):
            text = value.strip()
            if text.isdigit():
                return cls(int(text))
            key = text.replace(" ", "").replace("_", "").lower()
            for member in cls:
                if key == member.name.replace("_", "").lower():
                    return member
        raise ValueError(f"Invalid {cls.__name__.lower()}: {value!r}")

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()

    @property
    def wire_name(self) -> str:
        return self.label.replace(" ", "")


class Difficulty(_LabelledEnum):
    EASY = 1
    MEDIUM = 2
    HARD = 3


class Status(_LabelledEnum):
    NEW = 1
    FIRST_REVIEW = 2
    SECOND_REVIEW = 3
    MASTERED = 4

    @property
    def shorthand(self) -> str:
        return self.label.split()[0]


def parse_date(value) -> Optional[date]:
    """Parse an API date or timestamp into a local calendar date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.astimezone().date() if value.tzinfo else value.date()
    if isinstance(value, date):
        return value
    text = str(value)
    if "T" in text or " " in text.strip():
        return parse_datetime(text).date()
    return date.fromisoformat(text[:10])


def parse_datetime(value) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        moment = value
    else:
        moment = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    # Aware timestamps are shown in the caller's local zone
    return moment.astimezone() if moment.tzinfo else moment


def _pick(data: dict, snake: str):
    if snake in data:
        return data[snake]
    head, *rest = snake.split("_")
    camel = head + "".join(part.title() for part in rest)
    return data.get(camel)


@dataclass
class Problem:
    id: int
    problem_number: int
    title: str
    difficulty: Difficulty
    status: Status
    pattern: str
    date_attempted: date
    notes: str = ""
    first_review_date: Optional[date] = None
    second_review_date: Optional[date] = None
    final_review_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: dict) -> "Problem":
        return cls(
            id=int(data["id"]),
            problem_number=int(_pick(data, "problem_number")),
            title=data["title"],
            difficulty=Difficulty.parse(data["difficulty"]),
            status=Status.parse(data.get("status", Status.NEW)),
            pattern=data.get("pattern") or "",
            date_attempted=parse_date(_pick(data, "date_attempted")),
            notes=data.get("notes") or "",
            first_review_date=parse_date(_pick(data, "first_review_date")),
            second_review_date=parse_date(_pick(data, "second_review_date")),
            final_review_date=parse_date(_pick(data, "final_review_date")),
            created_at=parse_datetime(_pick(data, "created_at")),
            updated_at=parse_datetime(_pick(data, "updated_at")),
        )

    def to_dict(self) -> dict:
        def iso(value):
            return value.isoformat() if value else None

        return {
            "id": self.id,
            "problem_number": self.problem_number,
            "title": self.title,
            "difficulty": int(self.difficulty),
            "status": int(self.status),
            "pattern": self.pattern,
            "notes": self.notes,
            "date_attempted": iso(self.date_attempted),
            "first_review_date": iso(self.first_review_date),
            "second_review_date": iso(self.second_review_date),
            "final_review_date": iso(self.final_review_date),
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }


@dataclass
class CreateProblemRequest:
    problem_number: int
    title: str
    difficulty: Difficulty
    pattern: str
    notes: Optional[str] = None

    def to_api(self) -> dict:
        body = {
            "problem_number": self.problem_number,
            "title": self.title,
            "difficulty": int(self.difficulty),
            "pattern": self.pattern,
        }
        if self.notes:
            body["notes"] = self.notes
        return body


@dataclass
class ProblemStats:
    total_problems: int = 0
    mastered_count: int = 0
    new_count: int = 0
    first_review_count: int = 0
    second_review_count: int = 0
    easy_count: int = 0
    medium_count: int = 0
    hard_count: int = 0
    reviews_due_today: int = 0

    @classmethod
    def from_api(cls, data: dict) -> "ProblemStats":
        return cls(**{
            name: int(_pick(data, name) or 0)
            for name in cls.__dataclass_fields__
        })

    @classmethod
    def from_problems(cls, problems: list, today: Optional[date] = None) -> "ProblemStats":
        """Compute the same aggregate counts the server reports, locally."""
        from leet_tracker.schedule import is_review_due

        def count(pred):
            return sum(1 for p in problems if pred(p))

        return cls(
            total_problems=len(problems),
            mastered_count=count(lambda p: p.status == Status.MASTERED),
            new_count=count(lambda p: p.status == Status.NEW),
            first_review_count=count(lambda p: p.status == Status.FIRST_REVIEW),
            second_review_count=count(lambda p: p.status == Status.SECOND_REVIEW),
            easy_count=count(lambda p: p.difficulty == Difficulty.EASY),
            medium_count=count(lambda p: p.difficulty == Difficulty.MEDIUM),
            hard_count=count(lambda p: p.difficulty == Difficulty.HARD),
            reviews_due_today=count(lambda p: is_review_due(p, today)),
        )


@dataclass
class PatternStats:
    pattern: str
    count: int = 0
    mastered: int = 0
    problem_ids: list = field(default_factory=list)

    @property
    def mastery_percentage(self) -> int:
        return percentage(self.mastered, self.count)


def percentage(part: int, whole: int) -> int:
    """Whole-number percentage, rounding halves up; 0 when whole is 0."""
    if not whole:
        return 0
    return int(part * 100 / whole + 0.5)
