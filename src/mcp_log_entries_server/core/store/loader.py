"""Log file loading.

Reads log files asynchronously and turns each timestamped line into a
stored document with a (time, tiebreaker) key.
"""

from __future__ import annotations

import gzip
import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import aiofiles
from aiofiles.threadpool import wrap

from ..formats import LineParser, default_parser
from ..models import TimeKey

logger = logging.getLogger(__name__)

# Tiebreakers are file_no * stride + line_no, so lines of different files
# sharing a millisecond still order deterministically.
TIEBREAKER_STRIDE = 10**9
FILE_PATH_FIELD = "log.file.path"


@dataclass(frozen=True, slots=True)
class StoredDocument:
    key: TimeKey
    index: str
    doc_id: str
    fields: dict[str, Any]

    @property
    def gid(self) -> str:
        return f"{self.index}:{self.doc_id}"


@asynccontextmanager
async def _open_text(path: Path, *, encoding: str, decode_errors: str):
    """Open a log file for async text reading (plain or gzip)."""
    if path.suffix.lower() == ".gz":
        f = gzip.open(path, mode="rt", encoding=encoding, errors=decode_errors)
        af = wrap(f)
        try:
            yield af
        finally:
            await af.close()
    else:
        async with aiofiles.open(path, encoding=encoding, errors=decode_errors) as f:
            yield f


async def _enumerate_async(iterable, start: int = 0):
    """Async enumerate helper for async iterators."""
    index = start
    async for item in iterable:
        yield index, item
        index += 1


def _to_millis(ts) -> int:
    return int(ts.timestamp() * 1000)


async def iter_documents(
    log_path: str | Path,
    *,
    file_no: int = 0,
    parser: LineParser | None = None,
    timestamp_field: str = "@timestamp",
    encoding: str = "utf-8",
    decode_errors: str = "replace",
) -> AsyncIterator[StoredDocument]:
    """Yield one document per parsed, timestamped line, in file order."""
    path = Path(log_path)
    if not path.is_file():
        raise FileNotFoundError(f"Log file not found: {path}")

    parser = parser or default_parser()
    skipped = 0

    async with _open_text(path, encoding=encoding, decode_errors=decode_errors) as f:
        async for line_no, line in _enumerate_async(f, start=1):
            line = line.rstrip("\r\n")
            if not line.strip():
                continue
            parsed = parser.parse(line)
            if parsed is None or parsed.timestamp is None:
                skipped += 1
                continue

            fields = dict(parsed.fields)
            fields[timestamp_field] = parsed.timestamp.isoformat()
            fields[FILE_PATH_FIELD] = str(path)
            yield StoredDocument(
                key=TimeKey(
                    time=_to_millis(parsed.timestamp),
                    tiebreaker=file_no * TIEBREAKER_STRIDE + line_no,
                ),
                index=str(path),
                doc_id=str(line_no),
                fields=fields,
            )

    if skipped:
        logger.debug("Skipped %d line(s) without a parseable timestamp in %s", skipped, path)


async def load_documents(
    log_paths: Sequence[str | Path],
    *,
    parser: LineParser | None = None,
    timestamp_field: str = "@timestamp",
    encoding: str = "utf-8",
    decode_errors: str = "replace",
) -> list[StoredDocument]:
    """Load every file and return all documents sorted by key."""
    documents: list[StoredDocument] = []
    for file_no, path in enumerate(log_paths):
        async for doc in iter_documents(
            path,
            file_no=file_no,
            parser=parser,
            timestamp_field=timestamp_field,
            encoding=encoding,
            decode_errors=decode_errors,
        ):
            documents.append(doc)
    documents.sort(key=lambda d: d.key)
    return documents
