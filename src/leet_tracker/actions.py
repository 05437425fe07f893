"""User actions against the API, with optimistic local updates.

The problem list is owned by a ProblemStore instance. Each action mutates
the local copy, calls the server, and puts the old value back if the call
fails. Failures are reported through the Notifier as a single generic
message; nothing here retries.
"""
import logging
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Optional

from leet_tracker.errors import ApiError, InvalidTransition, ValidationError
from leet_tracker.models import Problem
from leet_tracker.pipeline import ListConfig, Page, clamp_page, filter_problems, run_pipeline
from leet_tracker.schedule import stamp_review, unstamp_review
from leet_tracker.validation import build_create_request, validate_notes

logger = logging.getLogger(__name__)

MARK_REVIEWED = "mark_reviewed"
NEEDS_MORE_REVIEW = "needs_more_review"
DELETE = "delete"
UPDATE_NOTES = "update_notes"
SUBMIT = "submit"
ACTION_KINDS = (MARK_REVIEWED, NEEDS_MORE_REVIEW, DELETE, UPDATE_NOTES, SUBMIT)


@dataclass(frozen=True)
class Notification:
    level: str
    message: str


class Notifier:
    """Queue of user-facing messages, drained by the view after each action."""

    def __init__(self):
        self._pending: list[Notification] = []

    def success(self, message: str) -> None:
        self._pending.append(Notification("success", message))

    def error(self, message: str) -> None:
        self._pending.append(Notification("error", message))

    def drain(self) -> list[Notification]:
        pending, self._pending = self._pending, []
        return pending


class KeyedLoaders:
    """Per-(action kind, problem id) busy flags.

    Used to ignore a repeated click on the same action for the same problem
    while a request is outstanding. Different action kinds on one id are not
    guarded against each other.
    """

    def __init__(self, kinds=ACTION_KINDS):
        self._active = {kind: set() for kind in kinds}

    def is_loading(self, kind: str, problem_id: int) -> bool:
        return problem_id in self._active[kind]

    def set_loading(self, kind: str, problem_id: int, value: bool) -> None:
        if value:
            self._active[kind].add(problem_id)
        else:
            self._active[kind].discard(problem_id)

    @contextmanager
    def loading(self, kind: str, problem_id: int):
        self.set_loading(kind, problem_id, True)
        try:
            yield
        finally:
            self.set_loading(kind, problem_id, False)


def handle_api_call(
    fn: Callable,
    action: str,
    notifier: Notifier,
    loaders: Optional[KeyedLoaders] = None,
    key: Optional[tuple] = None,
    on_success: Optional[Callable] = None,
    announce: bool = True,
) -> bool:
    """Run one API call and report the outcome. Returns True on success."""
    if loaders is not None and key is not None:
        if loaders.is_loading(*key):
            logger.info("Ignoring duplicate %s for %s", action, key)
            return False
        loaders.set_loading(*key, True)
    try:
        result = fn()
    except (ApiError, InvalidTransition) as exc:
        logger.error("Error during %s: %s", action, exc)
        notifier.error(f"Failed to {action}. Please try again.")
        return False
    finally:
        if loaders is not None and key is not None:
            loaders.set_loading(*key, False)

    if on_success is not None:
        on_success(result)
    if announce:
        if isinstance(result, dict) and result.get("message"):
            notifier.success(result["message"])
        else:
            notifier.success(f"Successfully completed {action}.")
    return True


class ProblemStore:
    """The in-memory problem list plus the list view configuration."""

    def __init__(self, api, notifier: Notifier, loaders: Optional[KeyedLoaders] = None,
                 config: Optional[ListConfig] = None):
        self.api = api
        self.notifier = notifier
        self.loaders = loaders or KeyedLoaders()
        self.config = config or ListConfig()
        self.problems: list[Problem] = []

    # --- local state ---

    def find(self, problem_id: int) -> Problem | None:
        for problem in self.problems:
            if problem.id == problem_id:
                return problem
        return None

    def _index(self, problem_id: int) -> int:
        for i, problem in enumerate(self.problems):
            if problem.id == problem_id:
                return i
        raise KeyError(problem_id)

    def _put(self, problem: Problem) -> None:
        self.problems[self._index(problem.id)] = problem

    def track(self, problem: Problem) -> None:
        """Insert or replace a problem fetched outside the full list."""
        if self.find(problem.id) is None:
            self.problems.append(problem)
        else:
            self._put(problem)

    def update_config(self, **changes) -> ListConfig:
        """Change filters (back to page 1) or move pages; always clamps."""
        if set(changes) <= {"current_page"}:
            config = replace(self.config, **changes)
        else:
            config = self.config.with_filters(**changes)
        self.config = self._clamped(config)
        return self.config

    def _clamped(self, config: ListConfig) -> ListConfig:
        return clamp_page(config, len(filter_problems(self.problems, config)))

    def page(self) -> Page:
        return run_pipeline(self.problems, self.config)

    # --- server actions ---

    def refresh(self) -> bool:
        def store(problems):
            self.problems = list(problems)
            self.config = self._clamped(self.config)

        return handle_api_call(
            self.api.list_all, "load problems", self.notifier, on_success=store, announce=False,
        )

    def _optimistic(self, kind: str, action: str, problem_id: int, local: Problem | None, call) -> bool:
        previous_index = self._index(problem_id)
        previous = self.problems[previous_index]
        if self.loaders.is_loading(kind, problem_id):
            logger.info("Ignoring duplicate %s for problem %s", action, problem_id)
            return False
        if local is None:
            del self.problems[previous_index]
        else:
            self.problems[previous_index] = local

        ok = handle_api_call(call, action, self.notifier, self.loaders, (kind, problem_id))
        if not ok:
            logger.info("Reverting %s on problem %s", action, problem_id)
            if local is None:
                self.problems.insert(previous_index, previous)
            else:
                self._put(previous)
        self.config = self._clamped(self.config)
        return ok

    def mark_reviewed(self, problem_id: int, now: Optional[datetime] = None) -> bool:
        problem = self.find(problem_id)
        if problem is None:
            raise KeyError(problem_id)
        try:
            advanced = stamp_review(problem, now)
        except InvalidTransition as exc:
            logger.error("Error during mark problem as reviewed: %s", exc)
            self.notifier.error("Failed to mark problem as reviewed. Please try again.")
            return False
        return self._optimistic(
            MARK_REVIEWED, "mark problem as reviewed", problem_id, advanced,
            lambda: self.api.advance(problem_id, problem.status),
        )

    def needs_more_review(self, problem_id: int) -> bool:
        problem = self.find(problem_id)
        if problem is None:
            raise KeyError(problem_id)
        return self._optimistic(
            NEEDS_MORE_REVIEW, "reset review timer", problem_id, unstamp_review(problem),
            lambda: self.api.reset_review_timer(problem_id),
        )

    def delete(self, problem_id: int) -> bool:
        if self.find(problem_id) is None:
            raise KeyError(problem_id)
        return self._optimistic(
            DELETE, "delete problem", problem_id, None,
            lambda: self.api.delete(problem_id),
        )

    def update_notes(self, problem_id: int, notes: str) -> bool:
        problem = self.find(problem_id)
        if problem is None:
            raise KeyError(problem_id)
        message = validate_notes(notes)
        if message:
            raise ValidationError({"notes": message})
        return self._optimistic(
            UPDATE_NOTES, "update notes", problem_id, replace(problem, notes=notes),
            lambda: self.api.update_notes(problem_id, notes),
        )

    def create(self, form: dict) -> int | None:
        """Validate and submit a new problem. Raises ValidationError before any request."""
        request = build_create_request(form)
        created = {}

        def fetch_created(new_id):
            created["id"] = new_id

        ok = handle_api_call(
            lambda: self.api.create(request), "add problem", self.notifier,
            self.loaders, (SUBMIT, 0), on_success=fetch_created,
        )
        if not ok:
            return None
        new_id = created.get("id")
        problem = self._fetch(new_id) if new_id is not None else None
        if problem is not None:
            self.problems.append(problem)
        else:
            self._reload_quietly()
        return new_id

    def _fetch(self, problem_id: int) -> Problem | None:
        try:
            return self.api.get(problem_id)
        except ApiError as exc:
            logger.warning("Could not load new problem %s: %s", problem_id, exc)
            return None

    def _reload_quietly(self) -> None:
        try:
            self.problems = self.api.list_all()
        except ApiError as exc:
            logger.warning("Could not reload problems: %s", exc)
