"""Bamboo REST client: fetches plan state and latest results.

Uses ``requests`` (sync).  Every transport, HTTP or decoding problem is
raised as ``FetchError`` so the poller can treat the server as offline.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import requests

from bambootray.config import BambooServer, TraySettings
from bambootray.errors import FetchError
from bambootray.models.plans import BUILDING, FAILED, IDLE, BuildPlan, Snapshot

logger = logging.getLogger(__name__)

_PLAN_PAGE_SIZE = 1000


class BambooClient:
    """Fetches all (or the configured) plans from one Bamboo server.

    Parameters
    ----------
    server:
        Connection details.  Basic auth is used when ``username`` is set.
    timeout:
        Per-request timeout in seconds.
    """

    def __init__(self, server: BambooServer, timeout: float = 10.0) -> None:
        self.server = server
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({"Accept": "application/json"})
        if server.username:
            self._session.auth = (server.username, server.password)

    @property
    def base_url(self) -> str:
        return self.server.url.rstrip("/")

    def __call__(self) -> Snapshot:
        plans = self.fetch_plans()
        try:
            return Snapshot(plans=tuple(plans))
        except ValueError as exc:
            raise FetchError(f"Inconsistent plan list from {self.base_url}: {exc}") from exc

    def fetch_plans(self) -> list[BuildPlan]:
        """Return the current state of every monitored plan."""
        data = self._get_json(
            "/rest/api/latest/plan",
            params={"expand": "plans.plan", "max-result": _PLAN_PAGE_SIZE},
        )
        try:
            raw_plans = data["plans"]["plan"]
        except (KeyError, TypeError) as exc:
            raise FetchError(f"Malformed plan list from {self.base_url}: {exc}") from exc
        if not isinstance(raw_plans, list):
            raise FetchError(f"Malformed plan list from {self.base_url}: expected a list of plans")

        wanted = set(self.server.plan_keys)
        plans: list[BuildPlan] = []
        for raw in raw_plans:
            if not isinstance(raw, dict):
                raise FetchError(f"Malformed plan entry from {self.base_url}: {raw!r}")
            key = raw.get("key", "")
            if not isinstance(key, str):
                raise FetchError(f"Malformed plan key from {self.base_url}: {key!r}")
            if wanted and key not in wanted:
                continue
            result = self._latest_result(key)
            plans.append(self._build_plan(raw, result))

        logger.debug("Fetched %d plan(s) from %s", len(plans), self.server.name)
        return plans

    def _latest_result(self, plan_key: str) -> dict[str, Any] | None:
        """Return the latest result for *plan_key*, or ``None`` if it never built."""
        result = self._get_json(
            f"/rest/api/latest/result/{plan_key}/latest",
            allow_missing=True,
        )
        if result is not None and not isinstance(result, dict):
            raise FetchError(f"Malformed result for {plan_key} from {self.base_url}")
        return result

    def _build_plan(self, raw: dict[str, Any], result: dict[str, Any] | None) -> BuildPlan:
        try:
            return self._parse_plan(raw, result)
        except (TypeError, AttributeError, ValueError) as exc:
            raise FetchError(
                f"Malformed plan {raw.get('key')!r} from {self.base_url}: {exc}"
            ) from exc

    def _parse_plan(self, raw: dict[str, Any], result: dict[str, Any] | None) -> BuildPlan:
        building = bool(raw.get("isBuilding", False))
        result = result or {}
        status = result.get("buildState", "")
        if status not in ("Successful", "Failed"):
            status = ""
        result_key = result.get("buildResultKey") or result.get("key", "")
        finished = result.get("buildRelativeTime") or result.get("buildCompletedTime") or ""

        return BuildPlan(
            plan_key=raw.get("key", ""),
            plan_name=raw.get("name", ""),
            short_plan_name=raw.get("shortName", ""),
            project_name=raw.get("projectName", ""),
            server_name=self.server.name,
            build_active=building,
            build_broken=status == FAILED,
            build_activity=BUILDING if building else IDLE,
            build_status=status,
            last_build_time=str(finished),
            last_build_duration=str(result.get("buildDurationDescription", "")),
            last_build_number=str(result.get("buildNumber", "")),
            last_vcs_revision=str(result.get("vcsRevisionKey", "")),
            successful_test_count=str(result.get("successfulTestCount", "")),
            failed_test_count=str(result.get("failedTestCount", "")),
            result_url=f"{self.base_url}/browse/{result_key}" if result_key else "",
        )

    def _get_json(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        *,
        allow_missing: bool = False,
    ) -> Any:
        url = self.base_url + path
        try:
            resp = self._session.get(url, params=params, timeout=self.timeout)
        except requests.Timeout as exc:
            raise FetchError(f"Request to {url} timed out after {self.timeout} seconds") from exc
        except requests.RequestException as exc:
            raise FetchError(f"Error communicating with {url}: {exc}") from exc

        if allow_missing and resp.status_code == 404:
            return None
        try:
            resp.raise_for_status()
        except requests.HTTPError as exc:
            raise FetchError(f"{url} returned HTTP {resp.status_code}") from exc

        try:
            return resp.json()
        except ValueError as exc:
            raise FetchError(f"Invalid JSON from {url}: {exc}") from exc


class MultiServerFetcher:
    """Combines several servers into one atomic snapshot.

    If any server fails the whole fetch fails, so a partial snapshot never
    replaces the baseline.
    """

    def __init__(self, clients: Iterable[BambooClient]) -> None:
        self.clients = list(clients)

    def __call__(self) -> Snapshot:
        plans: list[BuildPlan] = []
        for client in self.clients:
            plans.extend(client.fetch_plans())
        try:
            return Snapshot(plans=tuple(plans))
        except ValueError as exc:
            raise FetchError(f"Servers returned conflicting plans: {exc}") from exc


def fetcher_from_settings(settings: TraySettings) -> MultiServerFetcher:
    """Build a fetcher for every server in *settings*."""
    return MultiServerFetcher(
        BambooClient(server, timeout=settings.fetch_timeout_seconds)
        for server in settings.servers
    )
