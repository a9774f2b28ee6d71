"""
HTTP Call-Plan Backend

httpx implementation of CallPlanBackend against the dashboard REST API.
Transport errors and not-ok responses both surface as ServiceError so
callers handle one failure type.
"""

import time
from typing import Any, Optional

import httpx

from callplan.config import get_settings
from callplan.core.exceptions import ServiceError
from callplan.models.agenda import AgendaToday
from callplan.models.contact import PlanContact
from callplan.models.enums import Outcome
from callplan.models.reminder import Reminder, ReminderDraft
from callplan.models.stats import CallStats
from callplan.services.backend import CallPlanBackend
from callplan.utils.metrics import metrics
from callplan.utils.observability import log_service_call


class HttpCallPlanBackend(CallPlanBackend):
    """
    REST client for the call-plan backend.

    Usage:
        backend = HttpCallPlanBackend()
        plan = await backend.fetch_today_plan()
        await backend.aclose()

    A preconfigured httpx.AsyncClient may be passed in (tests use one
    built on httpx.MockTransport).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        settings = get_settings()
        self._base_url = (base_url or settings.backend_base_url).rstrip("/")
        self._token = token if token is not None else settings.backend_token
        self._timeout = timeout or settings.request_timeout_seconds
        self._client = client or httpx.AsyncClient(base_url=self._base_url, timeout=self._timeout)
        self._owns_client = client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        json: Optional[dict] = None,
        **context: Any,
    ) -> Any:
        """
        Send one request and decode the JSON body.

        Raises:
            ServiceError: On transport failure, non-2xx status or a bad body
        """
        start = time.perf_counter()
        try:
            response = await self._client.request(method, path, json=json, headers=self._headers())
        except httpx.HTTPError as e:
            duration_ms = (time.perf_counter() - start) * 1000
            log_service_call(operation, duration_ms, success=False, error=str(e), **context)
            raise ServiceError(operation, f"network error: {e}") from e

        duration_ms = (time.perf_counter() - start) * 1000
        metrics.service_latency.observe(duration_ms / 1000, operation=operation)

        if not response.is_success:
            detail = response.text[:200] or response.reason_phrase
            log_service_call(
                operation, duration_ms, success=False,
                error=detail, status_code=response.status_code, **context
            )
            raise ServiceError(operation, f"HTTP {response.status_code}: {detail}", status_code=response.status_code)

        log_service_call(operation, duration_ms, status_code=response.status_code, **context)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ServiceError(operation, "response body is not JSON", status_code=response.status_code) from e

    # ============================================
    # PLAN & CALL LOG
    # ============================================

    async def fetch_today_plan(self) -> list[PlanContact]:
        body = await self._request("fetch_today_plan", "GET", "/api/plan/today")
        rows = body.get("contacts", []) if isinstance(body, dict) else body or []
        return [PlanContact.model_validate(row) for row in rows]

    async def patch_outcome(self, contact_id: str, outcome: Outcome, note: str) -> None:
        await self._request(
            "patch_outcome", "PATCH", f"/api/plan/{contact_id}/outcome",
            json={"outcome": str(outcome), "notes": note},
            contact_id=contact_id,
        )

    async def log_call(self, contact_id: str, outcome: Outcome, note: str) -> None:
        await self._request(
            "log_call", "POST", "/api/calls/log",
            json={"contact_id": contact_id, "outcome": str(outcome), "notes": note},
            contact_id=contact_id,
        )

    # ============================================
    # REMINDERS
    # ============================================

    async def create_reminder(self, draft: ReminderDraft) -> Reminder:
        body = await self._request(
            "create_reminder", "POST", "/api/reminders",
            json=draft.to_payload(),
            contact_id=draft.contact_id,
        )
        if not isinstance(body, dict):
            raise ServiceError("create_reminder", "backend did not return the created reminder")
        return Reminder.model_validate(body.get("reminder", body))

    async def fetch_upcoming_reminders(self) -> list[Reminder]:
        body = await self._request("fetch_upcoming_reminders", "GET", "/api/reminders/upcoming")
        rows = body.get("reminders", []) if isinstance(body, dict) else body or []
        return [Reminder.model_validate(row) for row in rows]

    # ============================================
    # AGENDA & STATS
    # ============================================

    async def fetch_agenda_today(self) -> AgendaToday:
        body = await self._request("fetch_agenda_today", "GET", "/api/agenda/today")
        return AgendaToday.model_validate(body or {})

    async def fetch_call_stats_today(self) -> CallStats:
        body = await self._request("fetch_call_stats_today", "GET", "/api/calls/stats/today")
        return CallStats.model_validate(body or {})
