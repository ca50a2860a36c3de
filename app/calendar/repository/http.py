from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any, Iterable, Optional

import httpx

from app.calendar.errors import RemoteFailure, ValidationError
from app.calendar.types import (
    DAILY_OCCASION_NAME,
    Binding,
    CalendarEntry,
    DailyBinding,
    EntryUpdate,
    Occasion,
    OccasionFields,
    OccasionType,
    Outfit,
    OutfitItem,
    Period,
    WearHistory,
)
from app.calendar.wear_history import find_recent_wear

logger = logging.getLogger("app.calendar.remote")

PAGE_ALL = {"page-index": 1, "page-size": 100, "take-all": "true"}
DATETIME_FMT = "%Y-%m-%dT%H:%M:%S"


def _remote_id(value: str) -> int | str:
    return int(value) if value.isdigit() else value


def _str_id(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _parse_dt(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def _fmt_dt(day: date, at: Optional[time]) -> str:
    return datetime.combine(day, at or time.min).strftime(DATETIME_FMT)


def _parse_occasion(raw: dict) -> Occasion:
    day_at = _parse_dt(raw.get("dateOccasion"))
    if day_at is None:
        raise RemoteFailure("occasion without dateOccasion", operation="parse_occasion")
    return Occasion(
        id=str(raw["id"]),
        name=raw.get("name") or "",
        day=day_at.date(),
        occasion_type_id=_str_id(raw.get("occasionId")),
        occasion_type_name=raw.get("occasionName"),
        description=raw.get("description") or "",
        start_time=_parse_dt(raw.get("startTime")),
        end_time=_parse_dt(raw.get("endTime")),
        weather_snapshot=raw.get("weatherSnapshot"),
        user_id=_str_id(raw.get("userId")),
        created_at=_parse_dt(raw.get("createdDate")),
        updated_at=_parse_dt(raw.get("updatedDate")),
    )


def _parse_item(raw: dict) -> OutfitItem:
    return OutfitItem(
        id=str(raw.get("itemId", raw.get("id"))),
        name=raw.get("name") or "",
        category_name=raw.get("categoryName"),
        image_url=raw.get("imgUrl"),
        color=raw.get("color"),
    )


def _parse_outfit(raw: dict) -> Outfit:
    return Outfit(
        id=str(raw["id"]),
        name=raw.get("name") or "",
        items=[_parse_item(it) for it in raw.get("items") or []],
        is_favorite=bool(raw.get("isFavorite")),
        user_id=_str_id(raw.get("userId")),
    )


def _occasion_fields_body(fields: OccasionFields) -> dict:
    # the store expects full datetimes for every time-like field
    return {
        "occasionId": _remote_id(fields.occasion_type_id) if fields.occasion_type_id else None,
        "name": fields.name.strip(),
        "description": fields.description,
        "dateOccasion": _fmt_dt(fields.day, fields.start_time),
        "startTime": _fmt_dt(fields.day, fields.start_time),
        "endTime": _fmt_dt(fields.day, fields.end_time),
        "weatherSnapshot": fields.weather_snapshot or "",
    }


class HttpCalendarRepository:
    """Calendar store reached over the REST API.

    Responses are wrapped as ``{"statusCode", "message", "data"}``; anything
    else, a non-2xx status, or a transport error becomes ``RemoteFailure``.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    async def _call(self, method: str, path: str, *, params: dict | None = None, json: Any = None) -> Any:
        op = f"{method} {path}"
        try:
            resp = await self.client.request(method, path, params=params, json=json)
        except httpx.HTTPError as e:
            logger.warning("calendar remote transport error op=%s reason=%s", op, e)
            raise RemoteFailure(f"transport error: {e}", operation=op) from e
        try:
            body = resp.json() if resp.content else {}
        except ValueError:
            body = {}
        if resp.status_code >= 400:
            message = body.get("message") if isinstance(body, dict) else None
            logger.warning("calendar remote error op=%s status=%s message=%s", op, resp.status_code, message)
            raise RemoteFailure(message or f"remote returned {resp.status_code}", status_code=resp.status_code, operation=op)
        if not isinstance(body, dict):
            raise RemoteFailure("malformed response envelope", status_code=resp.status_code, operation=op)
        return body.get("data")

    @staticmethod
    def _page(data: Any) -> list:
        if isinstance(data, dict):
            return data.get("data") or []
        return data or []

    def _period_params(self, period: Period) -> dict:
        return {
            **PAGE_ALL,
            "start-date": period.start.isoformat(),
            "end-date": period.end.isoformat(),
        }

    # occasions

    async def list_occasions(self, period: Period) -> list[Occasion]:
        data = await self._call("GET", "/user-occasions", params=self._period_params(period))
        occasions = [_parse_occasion(raw) for raw in self._page(data)]
        return [o for o in occasions if o.day in period]

    async def get_occasion(self, occasion_id: str) -> Optional[Occasion]:
        try:
            data = await self._call("GET", f"/user-occasions/{occasion_id}")
        except RemoteFailure as e:
            if e.status_code == 404:
                return None
            raise
        return _parse_occasion(data) if data else None

    async def find_daily_occasion(self, day: date) -> Optional[Occasion]:
        params = {
            **PAGE_ALL,
            "start-date": day.isoformat(),
            "end-date": day.isoformat(),
            "search": DAILY_OCCASION_NAME,
        }
        data = await self._call("GET", "/user-occasions", params=params)
        for raw in self._page(data):
            occ = _parse_occasion(raw)
            if occ.day == day and occ.is_daily_placeholder:
                return occ
        return None

    async def create_occasion(self, fields: OccasionFields) -> Occasion:
        data = await self._call("POST", "/user-occasions", json=_occasion_fields_body(fields))
        return _parse_occasion(data)

    async def update_occasion(self, occasion_id: str, fields: OccasionFields) -> Occasion:
        data = await self._call("PUT", f"/user-occasions/{occasion_id}", json=_occasion_fields_body(fields))
        return _parse_occasion(data)

    async def delete_occasion(self, occasion_id: str) -> None:
        await self._call("DELETE", f"/user-occasions/{occasion_id}")

    async def list_occasion_types(self) -> list[OccasionType]:
        data = await self._call("GET", "/occasions", params=PAGE_ALL)
        return [OccasionType(id=str(raw["id"]), name=raw.get("name") or "") for raw in self._page(data)]

    # calendar entries

    def _entries_from_group(self, group: dict) -> list[CalendarEntry]:
        occasion = _parse_occasion(group["userOccasion"])
        is_daily = bool(group.get("isDaily"))
        entries = []
        for raw in group.get("outfits") or []:
            details = raw.get("outfitDetails")
            outfits = [_parse_outfit(details)] if details else []
            entries.append(
                CalendarEntry(
                    id=str(raw["calendarId"]),
                    occasion=occasion,
                    is_daily=is_daily,
                    outfit_ids=[str(raw["outfitId"])],
                    outfits=outfits,
                    used_at=_parse_dt(raw.get("dateUsed")) or occasion.start_time,
                    created_at=_parse_dt(raw.get("createdDate")),
                )
            )
        return entries

    async def list_calendar_entries(self, period: Period) -> list[CalendarEntry]:
        data = await self._call("GET", "/outfits/calendar", params=self._period_params(period))
        entries: list[CalendarEntry] = []
        for group in self._page(data):
            entries.extend(self._entries_from_group(group))
        return [e for e in entries if e.day in period]

    async def get_calendar_entry(self, entry_id: str) -> Optional[CalendarEntry]:
        try:
            data = await self._call("GET", f"/outfits/calendar/{entry_id}")
        except RemoteFailure as e:
            if e.status_code == 404:
                return None
            raise
        if not data:
            return None
        return next(iter(self._entries_from_group(data)), None)

    async def create_calendar_entry(self, outfit_ids: list[str], binding: Binding) -> list[CalendarEntry]:
        body: dict[str, Any] = {"outfitIds": [_remote_id(oid) for oid in outfit_ids]}
        if isinstance(binding, DailyBinding):
            body.update(isDaily=True, time=_fmt_dt(binding.day, None))
        else:
            body.update(isDaily=False, userOccasionId=_remote_id(binding.occasion_id))
        data = await self._call("POST", "/outfits/calendar", json=body)

        occasions: dict[str, Occasion] = {}
        entries = []
        for raw in data or []:
            occ_id = str(raw["userOccasionId"]) if raw.get("userOccasionId") is not None else ""
            if occ_id not in occasions:
                if isinstance(binding, DailyBinding):
                    occasions[occ_id] = Occasion(id=occ_id, name=DAILY_OCCASION_NAME, day=binding.day)
                else:
                    occ = await self.get_occasion(occ_id or binding.occasion_id)
                    if occ is None:
                        raise RemoteFailure("created entry references a missing occasion", operation="POST /outfits/calendar")
                    occasions[occ_id] = occ
            occ = occasions[occ_id]
            entries.append(
                CalendarEntry(
                    id=str(raw["id"]),
                    occasion=occ,
                    is_daily=bool(raw.get("isDaily", isinstance(binding, DailyBinding))),
                    outfit_ids=[str(raw["outfitId"])],
                    used_at=occ.start_time or datetime.combine(occ.day, time.min),
                    created_at=_parse_dt(raw.get("createdDate")),
                )
            )
        return entries

    async def update_calendar_entry(self, entry_id: str, fields: EntryUpdate) -> CalendarEntry:
        body: dict[str, Any] = {}
        if fields.outfit_ids is not None:
            if len(fields.outfit_ids) != 1:
                raise ValidationError("remote entries bind exactly one outfit", code="single_outfit_required")
            body["outfitId"] = _remote_id(fields.outfit_ids[0])
        if fields.occasion_id is not None:
            body["userOccasionId"] = _remote_id(fields.occasion_id)
        if fields.day is not None:
            body["dateUsed"] = _fmt_dt(fields.day, None)
        await self._call("PUT", f"/outfits/calendar/{entry_id}", json=body)
        entry = await self.get_calendar_entry(entry_id)
        if entry is None:
            raise RemoteFailure("updated entry not found", operation=f"PUT /outfits/calendar/{entry_id}")
        return entry

    async def delete_calendar_entry(self, entry_id: str) -> None:
        await self._call("DELETE", f"/outfits/calendar/{entry_id}")

    # wear history and outfits

    async def check_wear_history(self, item_id: str, day: date, window_days: int) -> WearHistory:
        params = {"date": day.isoformat(), "gap-days": window_days}
        data = await self._call("GET", f"/items/{item_id}/wear-history", params=params) or {}
        worn = [d for d in (_parse_dt(v) for v in data.get("wornDates") or []) if d is not None]
        # recompute locally so ordering and window bounds hold regardless of the store
        return find_recent_wear(item_id, worn, day, window_days)

    async def list_outfits(self, outfit_ids: Optional[Iterable[str]] = None) -> list[Outfit]:
        data = await self._call("GET", "/outfits/user", params=PAGE_ALL)
        outfits = [_parse_outfit(raw) for raw in self._page(data)]
        if outfit_ids is None:
            return outfits
        wanted = set(outfit_ids)
        return [o for o in outfits if o.id in wanted]
