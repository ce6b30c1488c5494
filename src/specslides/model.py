"""Specslides extract types (session identity, prompts, rendered result)."""

from __future__ import annotations

from dataclasses import dataclass

import msgspec

SCHEMA_VERSION = "1.0"
SOURCE_CODEX = "codex"


class PromptSession(msgspec.Struct, frozen=True, kw_only=True, rename="camel"):
    id: str
    created_at: str
    workspace_root: str
    source_path: str


class PromptMessage(msgspec.Struct, frozen=True, kw_only=True, omit_defaults=True):
    id: str
    timestamp: str = ""
    text: str


class PromptExtract(msgspec.Struct, frozen=True, kw_only=True, rename="camel"):
    schema_version: str = SCHEMA_VERSION
    source: str = SOURCE_CODEX
    session: PromptSession
    prompts: tuple[PromptMessage, ...]


@dataclass(frozen=True, slots=True)
class ExtractResult:
    extract: PromptExtract
    json: str
    markdown: str


def encode_extract(extract: PromptExtract) -> str:
    payload = msgspec.json.encode(extract)
    return msgspec.json.format(payload, indent=2).decode("utf-8")
