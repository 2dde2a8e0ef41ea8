"""Conversions between domain values and their persisted column encodings."""

import json
import logging
from datetime import datetime, timezone

from flashdeck.application.utils.dates import ensure_aware

logger = logging.getLogger(__name__)


def encode_tags(tags: list[str] | None) -> str:
    return json.dumps(list(tags or []), ensure_ascii=False)


def decode_tags(raw: str | bytes | None) -> list[str]:
    """
    Decode a serialized tag list, preserving order.

    Corrupt or missing payloads degrade to an empty list; non-string
    elements are dropped.
    """
    if raw is None or raw == "":
        return []
    try:
        value = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning(f"Ignoring malformed tags payload {raw!r}: {e}")
        return []
    if not isinstance(value, list):
        logger.warning(f"Ignoring non-list tags payload {raw!r}")
        return []
    return [tag for tag in value if isinstance(tag, str)]


def to_epoch_ms(value: datetime) -> int:
    return int(round(ensure_aware(value).timestamp() * 1000))


def from_epoch_ms(value: int | float) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def optional_from_epoch_ms(value: int | float | None) -> datetime | None:
    if value is None:
        return None
    return from_epoch_ms(value)
