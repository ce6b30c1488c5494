from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from specslides.errors import (
    MalformedInputError,
    NoPromptsError,
    NotFoundError,
)
from specslides.extract import (
    build_prompt_extract,
    extract_session_meta,
    extract_user_prompts,
)
from tests.factories import agent_message, session_meta, user_message


def _fixture_path(name: str) -> Path:
    return Path(__file__).parent / "fixtures" / name


class TestExtractSessionMeta:
    def test_reads_payload_fields(self) -> None:
        records = [session_meta("s1", "2024-01-01T00:00:00Z", "/work")]
        assert extract_session_meta(records) == (
            "s1",
            "2024-01-01T00:00:00Z",
            "/work",
        )

    def test_timestamp_preserved_verbatim(self) -> None:
        records = [session_meta(timestamp="2024-01-01 00:00:00.123456+00")]
        _, created_at, _ = extract_session_meta(records)
        assert created_at == "2024-01-01 00:00:00.123456+00"

    def test_falls_back_to_envelope_timestamp(self) -> None:
        record = {
            "type": "session_meta",
            "timestamp": "2024-02-02T10:00:00Z",
            "payload": {"id": "s1", "cwd": "/work"},
        }
        assert extract_session_meta([record])[1] == "2024-02-02T10:00:00Z"

    def test_payload_timestamp_wins_over_envelope(self) -> None:
        record = session_meta(timestamp="2024-01-01T00:00:00Z")
        record["timestamp"] = "1999-12-31T23:59:59Z"
        assert extract_session_meta([record])[1] == "2024-01-01T00:00:00Z"

    def test_only_first_record_is_used(self) -> None:
        records = [
            {"type": "turn_context", "payload": {"cwd": "/elsewhere"}},
            session_meta("first"),
            session_meta("second"),
        ]
        assert extract_session_meta(records)[0] == "first"

    def test_missing_payload(self) -> None:
        with pytest.raises(MalformedInputError, match="payload missing"):
            extract_session_meta([{"type": "session_meta"}])

    def test_non_object_payload(self) -> None:
        with pytest.raises(MalformedInputError, match="payload missing"):
            extract_session_meta([{"type": "session_meta", "payload": "s1"}])

    @pytest.mark.parametrize(
        "payload",
        [
            {"timestamp": "2024-01-01T00:00:00Z", "cwd": "/work"},
            {"id": "s1", "cwd": "/work"},
            {"id": "s1", "timestamp": "2024-01-01T00:00:00Z"},
            {"id": 123, "timestamp": "2024-01-01T00:00:00Z", "cwd": "/work"},
            {"id": "s1", "timestamp": "2024-01-01T00:00:00Z", "cwd": ""},
        ],
    )
    def test_missing_required_fields(self, payload: dict) -> None:
        record = {"type": "session_meta", "payload": payload}
        with pytest.raises(MalformedInputError, match="missing required fields"):
            extract_session_meta([record])

    def test_first_record_failure_is_not_retried(self) -> None:
        records = [{"type": "session_meta", "payload": {}}, session_meta()]
        with pytest.raises(MalformedInputError):
            extract_session_meta(records)

    def test_no_metadata_record(self) -> None:
        with pytest.raises(NotFoundError, match="session_meta record not found"):
            extract_session_meta([user_message("hi"), {"type": "turn_context"}])


class TestExtractUserPrompts:
    def test_ids_are_dense_after_filtering(self) -> None:
        records = [
            user_message("  "),
            user_message("first", "t1"),
            agent_message("ignored"),
            user_message(""),
            user_message("\n\tsecond\n", "t2"),
            user_message(None),
            user_message("third"),
        ]

        prompts = extract_user_prompts(records)

        assert [p.id for p in prompts] == ["p_1", "p_2", "p_3"]
        assert [p.text for p in prompts] == ["first", "second", "third"]
        assert [p.timestamp for p in prompts] == ["t1", "t2", ""]

    def test_requires_both_kind_and_subtype(self) -> None:
        records = [
            {
                "type": "response_item",
                "payload": {"type": "user_message", "message": "a"},
            },
            {
                "type": "event_msg",
                "payload": {"type": "agent_message", "message": "b"},
            },
            {"type": "event_msg", "payload": "user_message"},
            {"type": "event_msg"},
        ]
        assert extract_user_prompts(records) == []

    def test_wrong_typed_timestamp_is_absent(self) -> None:
        record = user_message("hello")
        record["timestamp"] = 1700000000
        [prompt] = extract_user_prompts([record])
        assert prompt.timestamp == ""

    def test_count_matches_non_blank_user_messages(self) -> None:
        texts = ["a", " ", "b", "", "c", "\n", "d"]
        records = [user_message(text) for text in texts]
        prompts = extract_user_prompts(records)
        assert len(prompts) == len([t for t in texts if t.strip()])
        assert [p.id for p in prompts] == [f"p_{n}" for n in range(1, 5)]

    def test_empty_stream(self) -> None:
        assert extract_user_prompts([]) == []


class TestBuildPromptExtract:
    def test_hello_and_blank_prompt(self, write_session: Callable[..., Path]) -> None:
        path = write_session(
            [
                session_meta("s1", "2024-01-01T00:00:00Z", "/work"),
                user_message("Hello"),
                user_message("  "),
            ]
        )

        result = build_prompt_extract(path)

        extract = result.extract
        assert extract.schema_version == "1.0"
        assert extract.source == "codex"
        assert extract.session.id == "s1"
        assert extract.session.source_path == str(path)
        assert [(p.id, p.text) for p in extract.prompts] == [("p_1", "Hello")]
        assert result.markdown.count("_**User") == 1
        assert "---" not in result.markdown

    def test_json_shape(self, write_session: Callable[..., Path]) -> None:
        path = write_session(
            [
                session_meta("s1", "2024-01-01T00:00:00Z", "/work"),
                user_message("Hello", "2024-01-01T00:00:05Z"),
                user_message("Again"),
            ]
        )

        result = build_prompt_extract(path)
        data = json.loads(result.json)

        assert data == {
            "schemaVersion": "1.0",
            "source": "codex",
            "session": {
                "id": "s1",
                "createdAt": "2024-01-01T00:00:00Z",
                "workspaceRoot": "/work",
                "sourcePath": str(path),
            },
            "prompts": [
                {"id": "p_1", "timestamp": "2024-01-01T00:00:05Z", "text": "Hello"},
                {"id": "p_2", "text": "Again"},
            ],
        }
        assert result.json.startswith('{\n  "schemaVersion": "1.0"')

    def test_resolves_directory_input(
        self, tmp_path: Path, write_session: Callable[..., Path]
    ) -> None:
        write_session(
            [session_meta("old"), user_message("old")],
            name="sessions/old.jsonl",
            mtime_ns=1_000_000_000,
        )
        newest = write_session(
            [session_meta("new"), user_message("new")],
            name="sessions/2025/new.jsonl",
            mtime_ns=2_000_000_000,
        )

        result = build_prompt_extract(tmp_path / "sessions")

        assert result.extract.session.id == "new"
        assert result.extract.session.source_path == str(newest)

    def test_directory_without_session_files(self, tmp_path: Path) -> None:
        (tmp_path / "notes.txt").write_text("hello")
        with pytest.raises(NotFoundError):
            build_prompt_extract(tmp_path)

    def test_missing_metadata_fails_before_prompts(
        self, write_session: Callable[..., Path]
    ) -> None:
        path = write_session([user_message("Hello"), user_message("World")])
        with pytest.raises(NotFoundError, match="session_meta"):
            build_prompt_extract(path)

    def test_no_prompts_is_an_error(self, write_session: Callable[..., Path]) -> None:
        path = write_session([session_meta(), user_message("   "), agent_message("hi")])
        with pytest.raises(NoPromptsError, match="no user prompts"):
            build_prompt_extract(path)

    def test_fixture_session(self) -> None:
        result = build_prompt_extract(_fixture_path("codex_session.jsonl"))

        extract = result.extract
        assert extract.session.id == "0195a1b2-c3d4-7e5f-8a9b-0c1d2e3f4a5b"
        assert extract.session.workspace_root == "/home/dev/specslides"
        assert [p.id for p in extract.prompts] == ["p_1", "p_2", "p_3"]
        assert extract.prompts[1].text == (
            "Now render the story page with a slide per prompt."
        )
        assert extract.prompts[2].timestamp == ""
        assert result.markdown.count("\n---\n") == 2
