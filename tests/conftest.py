import json
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest


@pytest.fixture
def write_session(tmp_path: Path) -> Callable[..., Path]:
    def _write(
        lines: list[dict[str, Any] | str],
        name: str = "session.jsonl",
        mtime_ns: int | None = None,
    ) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        rendered = [
            line if isinstance(line, str) else json.dumps(line) for line in lines
        ]
        path.write_text("\n".join(rendered) + "\n", encoding="utf-8")
        if mtime_ns is not None:
            os.utime(path, ns=(mtime_ns, mtime_ns))
        return path

    return _write
