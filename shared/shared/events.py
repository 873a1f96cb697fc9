import json
import uuid
from datetime import datetime, timezone

SCHEMA_VERSION = 1


def build_event(event_type: str, data: dict, source: str | None = None) -> dict:
    event = {
        "event_id": str(uuid.uuid4()),
        "event_type": event_type,
        "schema_version": SCHEMA_VERSION,
        "occurred_at": datetime.now(timezone.utc).isoformat(),
        "data": data,
    }
    if source:
        event["source"] = source
    return event


def to_json(event: dict) -> str:
    # datetimes inside data are rendered as ISO strings
    return json.dumps(event, separators=(",", ":"), ensure_ascii=False, default=_encode)


def _encode(value):
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


async def publish_event(publisher, event_type: str, data: dict, source: str | None = None) -> dict | None:
    """Routes the event by its type. A missing publisher means events are off."""
    if publisher is None:
        return None
    event = build_event(event_type, data, source)
    await publisher.publish(event_type, to_json(event))
    return event
