from typing import Iterable, List


def paginate(lines: Iterable[str], limit: int) -> List[str]:
    """Group whole lines into message-sized chunks.

    A chunk is flushed before a line that would push it past ``limit``
    characters, so a line that fits is never split across messages. A single
    line longer than ``limit`` is cut into ``limit``-sized pieces, each sent as
    its own chunk. No chunk exceeds ``limit`` and ``"".join(result)`` always
    equals ``"".join(lines)``.

    Args:
        lines: Text fragments, each normally ending with a newline.
        limit: Maximum characters per chunk.

    Returns:
        The chunks in order; empty when there is nothing to send.
    """
    if limit <= 0:
        raise ValueError("limit must be positive")

    chunks: List[str] = []
    buffer: List[str] = []
    size = 0
    for line in lines:
        if buffer and size + len(line) > limit:
            chunks.append("".join(buffer))
            buffer = []
            size = 0
        if len(line) > limit:
            chunks.extend(line[start:start + limit] for start in range(0, len(line), limit))
            continue
        buffer.append(line)
        size += len(line)

    if buffer:
        chunks.append("".join(buffer))
    return chunks
