"""Tolerant decoding of Codex session JSONL records.

Codex session logs mix many record kinds and change shape between releases.
Only two kinds matter here, so records stay plain dicts and every field read
goes through an accessor that treats a missing or wrong-typed value as absent.
"""

from __future__ import annotations

from typing import Any, TypeAlias

import msgspec

Record: TypeAlias = dict[str, Any]

SESSION_META = "session_meta"
EVENT_MSG = "event_msg"
USER_MESSAGE = "user_message"


def decode_record(line: str | bytes) -> Record | None:
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")
    raw_bytes = line.encode("utf-8", errors="replace")

    raw_bytes = raw_bytes.strip()
    if not raw_bytes:
        return None

    try:
        obj = msgspec.json.decode(raw_bytes)
    except Exception:
        return None

    if not isinstance(obj, dict):
        return None
    return obj


def get_str(record: Record, key: str) -> str:
    value = record.get(key)
    if isinstance(value, str):
        return value
    return ""


def get_dict(record: Record, key: str) -> Record | None:
    value = record.get(key)
    if isinstance(value, dict):
        return value
    return None


def record_type(record: Record) -> str:
    return get_str(record, "type")
