"""Export the problem list to a file and import problems from one."""
import csv
import json
import logging
from datetime import datetime
from pathlib import Path

from leet_tracker.errors import ApiError, ValidationError
from leet_tracker.models import ProblemStats
from leet_tracker.validation import build_create_request

logger = logging.getLogger(__name__)


def read_problem_file(file_path: str) -> list[dict]:
    """Read raw problem records from a JSON, YAML or CSV file."""
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        data = json.loads(path.read_text())
    elif suffix in (".yaml", ".yml"):
        import yaml
        data = yaml.safe_load(path.read_text())
    elif suffix == ".csv":
        with path.open(newline="") as fh:
            return [dict(row) for row in csv.DictReader(fh)]
    else:
        raise ValueError(f"Unsupported file type: {suffix or path.name}")

    if isinstance(data, dict):
        data = data.get("problems", [])
    if not isinstance(data, list):
        raise ValueError(f"{path.name} does not contain a list of problems")
    return [item for item in data if isinstance(item, dict)]


def export_problems(problems: list, file_path: str, stats: ProblemStats | None = None) -> dict:
    """Write problems and summary stats as JSON, or YAML for .yaml/.yml paths."""
    path = Path(file_path)
    if stats is None:
        stats = ProblemStats.from_problems(problems)
    payload = {
        "exported_at": datetime.now().isoformat(timespec="seconds"),
        "problems": [p.to_dict() for p in problems],
        "stats": vars(stats),
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() in (".yaml", ".yml"):
        import yaml
        path.write_text(yaml.safe_dump(payload, sort_keys=False))
    else:
        path.write_text(json.dumps(payload, indent=2))
    return {"filename": path.name, "count": len(problems)}


def import_problems(api, file_path: str) -> dict:
    """Create every valid record through the API. Invalid ones are skipped, not sent."""
    records = read_problem_file(file_path)
    imported, skipped, errors = 0, 0, []
    for index, record in enumerate(records, 1):
        try:
            request = build_create_request(record)
        except ValidationError as exc:
            skipped += 1
            errors.append({"record": index, "errors": exc.errors})
            continue
        try:
            api.create(request)
        except ApiError as exc:
            logger.error("Failed to import record %s: %s", index, exc)
            skipped += 1
            errors.append({"record": index, "errors": {"submit": str(exc)}})
            continue
        imported += 1
    return {"filename": Path(file_path).name, "imported": imported, "skipped": skipped, "errors": errors}
