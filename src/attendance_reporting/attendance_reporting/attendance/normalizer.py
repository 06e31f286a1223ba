"""Turn raw attendance payloads into canonical AttendanceEvent objects.

Batch API records, live push payloads and database rows all pass through
`normalize`. Malformed optional fields are recovered with safe defaults;
only a record without an employee id or event type is dropped.
"""

from __future__ import annotations

import hashlib
import json
import logging
import uuid
from datetime import datetime, tzinfo
from numbers import Real
from typing import Any, Iterable, Mapping, Optional

from ..common.datetime_utils import now_local
from ..core.constants import EPOCH_MILLIS_THRESHOLD
from ..core.enums import EventType
from .model import AttendanceEvent, Location

logger = logging.getLogger(__name__)

_TYPE_ALIASES = {
    "sign-in": EventType.SIGN_IN,
    "signin": EventType.SIGN_IN,
    "sign_in": EventType.SIGN_IN,
    "check-in": EventType.SIGN_IN,
    "checkin": EventType.SIGN_IN,
    "sign-out": EventType.SIGN_OUT,
    "signout": EventType.SIGN_OUT,
    "sign_out": EventType.SIGN_OUT,
    "check-out": EventType.SIGN_OUT,
    "checkout": EventType.SIGN_OUT,
}

_MISSING = object()


def _pick(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key, _MISSING)
        if value is not _MISSING and value is not None:
            return value
    return None


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def parse_event_type(value: Any) -> Optional[EventType]:
    if isinstance(value, EventType):
        return value
    text = _as_text(value)
    if not text:
        return None
    return _TYPE_ALIASES.get(text.lower())


def parse_location(value: Any) -> tuple[Optional[Location], bool]:
    """Return (location, invalid_flag).

    Absent input is (None, False); anything present but unusable is
    (None, True).
    """

    if value is None or value == "":
        return None, False
    if isinstance(value, Location):
        return value, False

    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return None, True
        if value is None:
            return None, False

    if isinstance(value, Mapping):
        lat = value.get("latitude", value.get("lat"))
        lon = value.get("longitude", value.get("lng", value.get("lon")))
    elif isinstance(value, (list, tuple)) and len(value) == 2:
        lat, lon = value
    else:
        return None, True

    if not (_is_number(lat) and _is_number(lon)):
        return None, True
    return Location(latitude=float(lat), longitude=float(lon)), False


def parse_timestamp(value: Any, tz: tzinfo) -> Optional[datetime]:
    """Parse ISO strings, epoch numbers and datetimes into an aware datetime in `tz`."""

    if value is None:
        return None

    if isinstance(value, datetime):
        moment = value
    elif _is_number(value):
        seconds = float(value)
        if abs(seconds) > EPOCH_MILLIS_THRESHOLD:
            seconds /= 1000.0
        try:
            return datetime.fromtimestamp(seconds, tz)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            moment = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    try:
        if moment.tzinfo is None:
            return moment.replace(tzinfo=tz).astimezone(tz)
        return moment.astimezone(tz)
    except (OverflowError, ValueError):
        # valid ISO text can still fall outside the representable range once shifted
        return None


def _parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "late"}
    return bool(value)


def _fallback_id(employee_id: str, event_type: EventType, raw_timestamp: Any) -> str:
    if raw_timestamp is None:
        # nothing stable to hash; such records never collapse into each other
        return "local-" + uuid.uuid4().hex
    seed = f"{employee_id}|{event_type.value}|{raw_timestamp}"
    return "derived-" + hashlib.sha1(seed.encode("utf-8")).hexdigest()[:16]


def normalize(raw: Any, *, tz: tzinfo, now: Optional[datetime] = None) -> Optional[AttendanceEvent]:
    """Normalize one raw record; returns None when employee id or type is missing."""

    if isinstance(raw, AttendanceEvent):
        return raw
    if not isinstance(raw, Mapping):
        logger.warning("Skipping attendance record of unsupported type %s", type(raw).__name__)
        return None

    employee_id = _as_text(_pick(raw, "employeeId", "employee_id"))
    event_type = parse_event_type(_pick(raw, "type", "event_type"))
    if not employee_id or event_type is None:
        logger.warning(
            "Skipping attendance record %r: missing employeeId or type",
            _pick(raw, "id", "_id"),
        )
        return None

    raw_timestamp = _pick(raw, "timestamp", "created_at", "createdAt")
    timestamp = parse_timestamp(raw_timestamp, tz)
    substituted = timestamp is None
    if substituted:
        timestamp = now.astimezone(tz) if now else now_local(tz)
        logger.warning(
            "Attendance record for employee %s has no usable timestamp (%r); using arrival time",
            employee_id,
            raw_timestamp,
        )

    location, location_invalid = parse_location(raw.get("location"))
    if location_invalid:
        logger.warning("Attendance record for employee %s has an unparsable location", employee_id)

    employee_name = _as_text(_pick(raw, "employeeName", "employee_name"))
    nested = raw.get("employee")
    if not employee_name and isinstance(nested, Mapping):
        employee_name = _as_text(nested.get("name"))

    event_id = _as_text(_pick(raw, "id", "_id", "attendance_id"))
    if not event_id:
        event_id = _fallback_id(employee_id, event_type, raw_timestamp)

    return AttendanceEvent(
        id=event_id,
        employee_id=employee_id,
        type=event_type,
        timestamp=timestamp,
        employee_name=employee_name,
        is_late=event_type == EventType.SIGN_IN and _parse_bool(_pick(raw, "isLate", "is_late")),
        organization_id=_as_text(_pick(raw, "organizationId", "organization_id")),
        location=location,
        location_invalid=location_invalid,
        verification_method=_as_text(_pick(raw, "verificationMethod", "verification_method")),
        notes=_as_text(raw.get("notes")),
        ip_address=_as_text(_pick(raw, "ipAddress", "ip_address")),
        timestamp_substituted=substituted,
    )


def normalize_many(
    raws: Iterable[Any], *, tz: tzinfo, now: Optional[datetime] = None
) -> list[AttendanceEvent]:
    events: list[AttendanceEvent] = []
    skipped = 0
    for raw in raws or ():
        event = normalize(raw, tz=tz, now=now)
        if event is None:
            skipped += 1
            continue
        events.append(event)
    if skipped:
        logger.warning("Skipped %d malformed attendance records", skipped)
    return events
