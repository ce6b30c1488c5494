from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from .errors import MalformedInputError, NoPromptsError, NotFoundError
from .logging import get_logger
from .model import (
    ExtractResult,
    PromptExtract,
    PromptMessage,
    PromptSession,
    encode_extract,
)
from .paths import resolve_input
from .render import render_markdown
from .schemas.codex import (
    EVENT_MSG,
    SESSION_META,
    USER_MESSAGE,
    Record,
    get_dict,
    get_str,
    record_type,
)
from .session_log import read_records

logger = get_logger(__name__)


def extract_session_meta(records: Iterable[Record]) -> tuple[str, str, str]:
    """Return ``(session_id, created_at, workspace_root)`` from the first
    ``session_meta`` record.

    A timestamp missing from the payload falls back to the record envelope.
    Later ``session_meta`` records are ignored.
    """
    for record in records:
        if record_type(record) != SESSION_META:
            continue

        payload = get_dict(record, "payload")
        if payload is None:
            raise MalformedInputError("session_meta payload missing")

        session_id = get_str(payload, "id")
        created_at = get_str(payload, "timestamp")
        workspace_root = get_str(payload, "cwd")

        if not created_at:
            created_at = get_str(record, "timestamp")

        if not session_id or not created_at or not workspace_root:
            raise MalformedInputError("session_meta missing required fields")

        return session_id, created_at, workspace_root

    raise NotFoundError("session_meta record not found")


def extract_user_prompts(records: Iterable[Record]) -> list[PromptMessage]:
    prompts: list[PromptMessage] = []
    index = 1

    for record in records:
        if record_type(record) != EVENT_MSG:
            continue

        payload = get_dict(record, "payload")
        if payload is None or record_type(payload) != USER_MESSAGE:
            continue

        message = get_str(payload, "message").strip()
        if not message:
            continue

        prompts.append(
            PromptMessage(
                id=f"p_{index}",
                timestamp=get_str(record, "timestamp"),
                text=message,
            )
        )
        index += 1

    return prompts


def build_prompt_extract(input_path: str | Path) -> ExtractResult:
    resolved = resolve_input(input_path)
    records = read_records(resolved)

    session_id, created_at, workspace_root = extract_session_meta(records)

    prompts = extract_user_prompts(records)
    if not prompts:
        raise NoPromptsError("no user prompts found in session")

    extract = PromptExtract(
        session=PromptSession(
            id=session_id,
            created_at=created_at,
            workspace_root=workspace_root,
            source_path=str(resolved),
        ),
        prompts=tuple(prompts),
    )
    logger.debug(
        "extract.built",
        session_id=session_id,
        prompts=len(prompts),
        source_path=str(resolved),
    )
    return ExtractResult(
        extract=extract,
        json=encode_extract(extract),
        markdown=render_markdown(extract),
    )
