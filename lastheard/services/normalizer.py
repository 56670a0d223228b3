"""
Brandmeister last-heard event normalizer.

Each feed envelope carries a JSON payload describing one call session event.
Only completed group voice calls are kept: the payload must be a
"Session-Stop" event, tagged Group/Voice/Call, name both ends of the call,
last more than five seconds and not target the local talkgroup.

Evaluation is stateless; nothing is remembered between events.
"""
import json
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

SESSION_STOP_EVENT = "Session-Stop"
REQUIRED_CALL_TYPES = frozenset({"Group", "Voice", "Call"})
MIN_CALL_DURATION = 5  # seconds, exclusive
LOCAL_TALKGROUP_ID = 9


class Rejection(str, Enum):
    """Why an event did not become a call record."""
    MALFORMED = "malformed"
    NOT_SESSION_STOP = "not_session_stop"
    WRONG_CALL_TYPE = "wrong_call_type"
    MISSING_FIELDS = "missing_fields"
    INVALID_TIMES = "invalid_times"
    TOO_SHORT = "too_short"
    LOCAL_TALKGROUP = "local_talkgroup"


@dataclass(frozen=True)
class NormalizedCall:
    """A completed call, ready to be stored."""
    source_id: int
    destination_id: int
    source_call: str
    source_name: Optional[str]
    destination_call: Optional[str]
    destination_name: str
    start: int
    stop: int
    talker_alias: Optional[str]
    duration: int

    def as_row(self) -> dict:
        return {
            "source_id": self.source_id,
            "destination_id": self.destination_id,
            "source_call": self.source_call,
            "source_name": self.source_name,
            "destination_call": self.destination_call,
            "destination_name": self.destination_name,
            "start": self.start,
            "stop": self.stop,
            "talker_alias": self.talker_alias,
            "duration": self.duration,
        }


def to_number(value: Any) -> Optional[float]:
    """Coerce an upstream numeric field, returning None unless it is finite."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def to_int(value: Any) -> Optional[int]:
    number = to_number(value)
    return int(number) if number is not None else None


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _optional_text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def decode_payload(payload: Any) -> Optional[dict]:
    """Decode a payload into a dict, or None when it is not a JSON object."""
    if isinstance(payload, dict):
        return payload
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError:
            return None
    if not isinstance(payload, str):
        return None
    try:
        decoded = json.loads(payload)
    except ValueError:
        return None
    return decoded if isinstance(decoded, dict) else None


def evaluate_event(payload: Any) -> tuple[Optional[NormalizedCall], Optional[Rejection]]:
    """
    Run one event through the filter.

    Returns (call, None) for an accepted event or (None, reason) for a
    rejected one. Never raises for bad input.
    """
    msg = decode_payload(payload)
    if msg is None:
        return None, Rejection.MALFORMED

    if msg.get("Event") != SESSION_STOP_EVENT:
        return None, Rejection.NOT_SESSION_STOP

    call_types = msg.get("CallTypes")
    if not isinstance(call_types, (list, tuple)) or not REQUIRED_CALL_TYPES.issubset(
        t for t in call_types if isinstance(t, str)
    ):
        return None, Rejection.WRONG_CALL_TYPE

    source_call = _text(msg.get("SourceCall"))
    destination_name = _text(msg.get("DestinationName"))
    source_id = to_int(msg.get("SourceID"))
    destination_id = to_int(msg.get("DestinationID"))
    if not source_call or not destination_name or source_id is None or destination_id is None:
        return None, Rejection.MISSING_FIELDS

    start = to_number(msg.get("Start"))
    stop = to_number(msg.get("Stop"))
    if start is None or stop is None:
        return None, Rejection.INVALID_TIMES

    start, stop = int(start), int(stop)
    duration = stop - start
    if duration <= MIN_CALL_DURATION:
        return None, Rejection.TOO_SHORT

    if destination_id == LOCAL_TALKGROUP_ID:
        return None, Rejection.LOCAL_TALKGROUP

    call = NormalizedCall(
        source_id=source_id,
        destination_id=destination_id,
        source_call=source_call,
        source_name=_optional_text(msg.get("SourceName")),
        destination_call=_optional_text(msg.get("DestinationCall")),
        destination_name=destination_name,
        start=start,
        stop=stop,
        talker_alias=_optional_text(msg.get("TalkerAlias")),
        duration=duration,
    )
    return call, None


def normalize_event(payload: Any) -> Optional[NormalizedCall]:
    """Return the call record for an accepted event, else None."""
    call, _ = evaluate_event(payload)
    return call
