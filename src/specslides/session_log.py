from __future__ import annotations

from pathlib import Path

from .errors import EmptyInputError, SessionReadError
from .logging import get_logger
from .schemas.codex import Record, decode_record

logger = get_logger(__name__)


def read_records(path: Path) -> list[Record]:
    """Read every decodable JSON object from a session log, in file order.

    Lines that are blank, not JSON, or not JSON objects are skipped.
    """
    records: list[Record] = []
    skipped = 0
    try:
        handle = open(path, "rb")
    except OSError as e:
        raise SessionReadError(f"open session file: {e}") from e

    with handle:
        try:
            for line in handle:
                if not line.strip():
                    continue
                record = decode_record(line)
                if record is None:
                    skipped += 1
                    continue
                records.append(record)
        except OSError as e:
            raise SessionReadError(f"read session file: {e}") from e

    logger.debug(
        "session_log.read", path=str(path), records=len(records), skipped=skipped
    )
    if not records:
        raise EmptyInputError("session file is empty or unreadable")
    return records
