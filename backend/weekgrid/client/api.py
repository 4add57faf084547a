from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import Any

import httpx

from weekgrid.core.config import get_settings
from weekgrid.core.exceptions import (
    AppError,
    NoBaselineError,
    PermissionDeniedError,
    ResourceNotFoundError,
    TransactionError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _not_found(message: str, details: dict) -> AppError:
    return ResourceNotFoundError(details.get("resource_type", "Resource"), details.get("resource_id", "unknown"))


def _no_baseline(message: str, details: dict) -> AppError:
    return NoBaselineError(details.get("schedule_id"))


ERROR_FACTORIES: dict[str, Callable[[str, dict], AppError]] = {
    ValidationError.code: ValidationError,
    ResourceNotFoundError.code: _not_found,
    PermissionDeniedError.code: PermissionDeniedError,
    NoBaselineError.code: _no_baseline,
    TransactionError.code: TransactionError,
}


def error_from_response(response: httpx.Response) -> AppError:
    """Rebuild the server-side exception from an error response body."""
    try:
        payload = response.json()
    except ValueError:
        payload = {}
    if not isinstance(payload, dict):
        payload = {}

    message = payload.get("message") or response.reason_phrase or "Request failed"
    details = payload.get("details") or {}
    factory = ERROR_FACTORIES.get(payload.get("code"))
    if factory is not None:
        return factory(message, details)
    if response.status_code == 422:
        return ValidationError("Request validation failed", details={"errors": payload.get("detail")})
    if response.status_code == 404:
        return ResourceNotFoundError("Resource", str(response.request.url.path))
    detail = payload.get("detail")
    return AppError(detail if isinstance(detail, str) else message, status_code=response.status_code, details=details)


class ScheduleApiClient:
    """Async wrapper over the schedule HTTP API; error responses raise the matching AppError."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self._client = httpx.AsyncClient(
            base_url=(base_url or settings.api_base_url).rstrip("/"),
            timeout=timeout if timeout is not None else settings.client_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "ScheduleApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, *, json: dict | None = None, params: dict | None = None) -> Any:
        response = await self._client.request(method, path, json=json, params=params)
        if response.is_error:
            error = error_from_response(response)
            logger.debug("API ERROR | method=%s | path=%s | status=%s | code=%s", method, path, response.status_code, error.code)
            raise error
        return response.json()

    # registry

    async def list_teachers(self) -> list[dict]:
        return await self._request("GET", "/teachers/")

    async def get_active_schedule(self, teacher_id: int) -> dict:
        return await self._request("GET", f"/schedules/teacher/{teacher_id}")

    async def get_current_semester(self) -> dict:
        return await self._request("GET", "/calendar/semester/current")

    # reads

    async def get_week(self, schedule_id: int, week: int) -> dict:
        return await self._request("GET", f"/schedules/{schedule_id}/week/{week}")

    async def get_original(self, schedule_id: int) -> dict:
        return await self._request("GET", f"/schedules/{schedule_id}/original")

    # reconciliation

    async def save_original(self, schedule_id: int) -> dict:
        return await self._request("POST", f"/schedules/{schedule_id}/save-original")

    async def reset(self, schedule_id: int) -> dict:
        return await self._request("POST", f"/schedules/{schedule_id}/reset")

    # arrangements

    async def create_course(
        self,
        schedule_id: int,
        weekday: int,
        time_slot: int,
        course_name: str,
        *,
        classroom: str | None = None,
        notes: str | None = None,
        edit_mode: bool = False,
    ) -> dict:
        body = {
            "scheduleId": schedule_id,
            "weekday": weekday,
            "timeSlot": time_slot,
            "courseName": course_name,
            "classroom": classroom,
            "notes": notes,
            "isEditMode": edit_mode,
        }
        return await self._request("POST", "/courses/", json=body)

    async def move_course(self, course_id: int, weekday: int, time_slot: int, *, schedule_id: int | None = None) -> dict:
        body = {"weekday": weekday, "timeSlot": time_slot, "scheduleId": schedule_id}
        return await self._request("PUT", f"/courses/{course_id}/move", json=body)

    async def delete_course(self, course_id: int, *, edit_mode: bool = False) -> dict:
        return await self._request("DELETE", f"/courses/{course_id}", params={"editMode": str(edit_mode).lower()})

    async def create_special_care(
        self,
        schedule_id: int,
        specific_date: date,
        course_name: str,
        *,
        classroom: str | None = None,
        notes: str | None = None,
        edit_mode: bool = False,
    ) -> dict:
        body = {
            "scheduleId": schedule_id,
            "specificDate": specific_date.isoformat(),
            "courseName": course_name,
            "classroom": classroom,
            "notes": notes,
            "isEditMode": edit_mode,
        }
        return await self._request("POST", "/special-care/", json=body)

    async def delete_special_care(self, care_id: int, *, edit_mode: bool = False) -> dict:
        return await self._request("DELETE", f"/special-care/{care_id}", params={"editMode": str(edit_mode).lower()})
