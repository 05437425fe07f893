"""Client-side checks for the create/edit problem form."""
from leet_tracker.errors import ValidationError
from leet_tracker.models import CreateProblemRequest, Difficulty

MAX_PROBLEM_NUMBER = 10000


def validate_problem_number(value) -> str | None:
    text = str(value if value is not None else "").strip()
    if not text:
        return "Problem number is required"
    try:
        number = int(text)
    except ValueError:
        return "Problem number must be a positive integer"
    if number <= 0:
        return "Problem number must be a positive integer"
    if number > MAX_PROBLEM_NUMBER:
        return "Problem number seems unusually high"
    return None


def validate_title(value: str) -> str | None:
    value = value or ""
    if not value.strip():
        return "Title is required"
    if len(value.strip()) < 3:
        return "Title must be at least 3 characters long"
    if len(value) > 200:
        return "Title must be less than 200 characters"
    return None


def validate_pattern(value: str) -> str | None:
    value = value or ""
    if not value.strip():
        return "Pattern is required"
    if len(value.strip()) < 2:
        return "Pattern must be at least 2 characters long"
    if len(value) > 100:
        return "Pattern must be less than 100 characters"
    return None


def validate_notes(value: str) -> str | None:
    if value and len(value) > 1000:
        return "Notes must be less than 1000 characters"
    return None


def validate_difficulty(value) -> str | None:
    try:
        Difficulty.parse(value)
    except ValueError:
        return "Difficulty must be Easy, Medium or Hard"
    return None


def validate_problem_form(data: dict) -> dict:
    """Return {field: message} for every invalid field; empty when the form is valid."""
    checks = {
        "problem_number": validate_problem_number,
        "title": validate_title,
        "difficulty": validate_difficulty,
        "pattern": validate_pattern,
        "notes": validate_notes,
    }
    errors = {}
    for name, check in checks.items():
        message = check(data.get(name))
        if message:
            errors[name] = message
    return errors


def build_create_request(data: dict) -> CreateProblemRequest:
    errors = validate_problem_form(data)
    if errors:
        raise ValidationError(errors)
    return CreateProblemRequest(
        problem_number=int(str(data["problem_number"]).strip()),
        title=data["title"].strip(),
        difficulty=Difficulty.parse(data["difficulty"]),
        pattern=data["pattern"].strip(),
        notes=(data.get("notes") or "").strip() or None,
    )
