"""Line source for transcript files, bounded to a tail byte budget."""

import logging
from collections.abc import Iterator
from pathlib import Path

logger = logging.getLogger("statusline.reader")


def _decode_line(raw: bytes) -> str:
    return raw.rstrip(b"\r\n").decode("utf-8", errors="replace")


def read_tail_lines(path: Path, max_bytes: int) -> list[str]:
    """Read the last `max_bytes` bytes of a file as lines.

    When the read starts past the beginning of the file the first fragment
    is a partial line and is dropped. Returns [] on any I/O error.
    """
    try:
        with open(path, "rb") as f:
            f.seek(0, 2)
            size = f.tell()
            offset = max(0, size - max_bytes)
            f.seek(offset)
            data = f.read(size - offset)
    except OSError as e:
        logger.debug("Cannot read transcript tail %s: %s", path, e)
        return []

    chunks = data.split(b"\n")
    if offset > 0 and chunks:
        chunks.pop(0)
    # A trailing newline leaves an empty final chunk, not a line
    if chunks and chunks[-1] == b"":
        chunks.pop()
    return [_decode_line(c) for c in chunks]


def iter_transcript_lines(path: str | Path | None, max_bytes: int) -> Iterator[str]:
    """Yield transcript lines, favouring the most recent under truncation.

    Files within the budget are streamed in full. Larger files are read
    from the tail only. Missing paths and I/O errors yield nothing.
    """
    if not path:
        return
    path = Path(path)
    try:
        size = path.stat().st_size
    except OSError as e:
        logger.debug("Transcript not available at %s: %s", path, e)
        return

    if size > max_bytes:
        logger.debug("Transcript %s is %d bytes, reading last %d", path, size, max_bytes)
        yield from read_tail_lines(path, max_bytes)
        return

    try:
        with open(path, "rb") as f:
            for raw in f:
                yield _decode_line(raw)
    except OSError as e:
        logger.debug("Transcript read failed for %s: %s", path, e)
