"""HTTP client for the remote problems API."""
import logging
from typing import Optional

import httpx

from leet_tracker.config import settings
from leet_tracker.errors import ApiError
from leet_tracker.models import CreateProblemRequest, Problem, ProblemStats, Status
from leet_tracker.schedule import review_endpoint

logger = logging.getLogger(__name__)


class ProblemsApi:
    """Thin wrapper over the /problems endpoints.

    Non-2xx responses and transport failures raise ApiError. Empty (204)
    bodies are a valid success and come back as None, as do bodies that
    fail to parse.
    """

    def __init__(
        self,
        base_url: str = settings.api_url,
        timeout: float = settings.timeout,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, **kwargs):
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise ApiError(f"Could not reach {self.base_url}: {exc}") from exc

        if not response.is_success:
            message = response.text.strip() or f"HTTP {response.status_code}: {response.reason_phrase}"
            logger.error("%s %s returned %s: %s", method, path, response.status_code, message)
            raise ApiError(message, status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            logger.warning("Ignoring unparseable response body from %s %s", method, path)
            return None

    def _problems(self, data) -> list[Problem]:
        if not isinstance(data, list):
            return []
        problems = []
        for item in data:
            try:
                problems.append(Problem.from_api(item))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed problem record %r: %s", item, exc)
        return problems

    # --- reads ---

    def list_all(self) -> list[Problem]:
        return self._problems(self._request("GET", "/problems"))

    def list_today(self) -> list[Problem]:
        return self._problems(self._request("GET", "/problems/today"))

    def list_reviews(self) -> list[Problem]:
        return self._problems(self._request("GET", "/problems/reviews"))

    def get(self, problem_id: int) -> Problem | None:
        data = self._request("GET", f"/problems/{problem_id}")
        if not isinstance(data, dict):
            return None
        try:
            return Problem.from_api(data)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Malformed problem %s: %s", problem_id, exc)
            return None

    def get_stats(self) -> ProblemStats | None:
        data = self._request("GET", "/problems/stats")
        if not isinstance(data, dict):
            return None
        return ProblemStats.from_api(data)

    def get_by_topic(self, topic: str | None = None) -> list[Problem]:
        params = {"topic": topic} if topic else None
        return self._problems(self._request("GET", "/problems/topics", params=params))

    def search(self, query: str | None = None) -> list[Problem]:
        params = {"q": query} if query else None
        return self._problems(self._request("GET", "/problems/search", params=params))

    # --- writes ---

    def create(self, request: CreateProblemRequest) -> int | None:
        data = self._request("POST", "/problems", json=request.to_api())
        if isinstance(data, dict) and "id" in data:
            return int(data["id"])
        return None

    def update_for_first_review(self, problem_id: int):
        return self._request("PUT", f"/problems/{problem_id}/first-review", json={})

    def update_for_second_review(self, problem_id: int):
        return self._request("PUT", f"/problems/{problem_id}/second-review", json={})

    def update_for_master_review(self, problem_id: int):
        return self._request("PUT", f"/problems/{problem_id}/master-review", json={})

    def advance(self, problem_id: int, status: Status):
        """Call whichever of the three review endpoints follows `status`."""
        return self._request("PUT", f"/problems/{problem_id}/{review_endpoint(status)}", json={})

    def reset_review_timer(self, problem_id: int):
        return self._request("PUT", f"/problems/{problem_id}/reset-timer", json={})

    def update_notes(self, problem_id: int, notes: str):
        return self._request("PUT", f"/problems/{problem_id}/notes", json={"notes": notes})

    def delete(self, problem_id: int):
        return self._request("DELETE", f"/problems/{problem_id}")
