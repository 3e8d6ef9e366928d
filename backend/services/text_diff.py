"""Word-level diff between original and suggested text.

Myers' O(ND) shortest edit script over word and whitespace tokens, after
trimming and collapsing whitespace. Adjacent operations of one kind are
merged into a single chunk, and within a change run deletions come
before insertions.
"""

import re

from models.schemas.diff import DiffChunk, DiffStats

_TOKEN_RE = re.compile(r"\s+|\S+")

Op = tuple[str, str]  # (type, token)


def normalize_whitespace(text: str) -> str:
    return " ".join(text.split())


def tokenize(text: str) -> list[str]:
    return _TOKEN_RE.findall(text)


def _shortest_edit(a: list[str], b: list[str]) -> list[Op]:
    n, m = len(a), len(b)
    v: dict[int, int] = {1: 0}
    trace: list[dict[int, int]] = []

    for d in range(n + m + 1):
        trace.append(dict(v))
        for k in range(-d, d + 1, 2):
            if k == -d or (k != d and v[k - 1] < v[k + 1]):
                x = v[k + 1]
            else:
                x = v[k - 1] + 1
            y = x - k
            while x < n and y < m and a[x] == b[y]:
                x += 1
                y += 1
            v[k] = x
            if x >= n and y >= m:
                return _backtrack(trace, a, b)
    return []


def _backtrack(trace: list[dict[int, int]], a: list[str], b: list[str]) -> list[Op]:
    x, y = len(a), len(b)
    ops: list[Op] = []
    for d in range(len(trace) - 1, -1, -1):
        v = trace[d]
        k = x - y
        if k == -d or (k != d and v[k - 1] < v[k + 1]):
            prev_k = k + 1
        else:
            prev_k = k - 1
        prev_x = v[prev_k]
        prev_y = prev_x - prev_k

        while x > prev_x and y > prev_y:
            ops.append(("equal", a[x - 1]))
            x -= 1
            y -= 1
        if d > 0:
            if x == prev_x:
                ops.append(("insert", b[y - 1]))
            else:
                ops.append(("delete", a[x - 1]))
        x, y = prev_x, prev_y

    ops.reverse()
    return ops


def _coalesce(ops: list[Op]) -> list[DiffChunk]:
    chunks: list[DiffChunk] = []
    deleted: list[str] = []
    inserted: list[str] = []

    def flush_changes() -> None:
        if deleted:
            chunks.append(DiffChunk(type="delete", value="".join(deleted)))
            deleted.clear()
        if inserted:
            chunks.append(DiffChunk(type="insert", value="".join(inserted)))
            inserted.clear()

    for kind, token in ops:
        if kind == "delete":
            deleted.append(token)
        elif kind == "insert":
            inserted.append(token)
        else:
            flush_changes()
            if chunks and chunks[-1].type == "equal":
                chunks[-1].value += token
            else:
                chunks.append(DiffChunk(type="equal", value=token))
    flush_changes()
    return chunks


def compute_word_diff(original: str, suggested: str) -> list[DiffChunk]:
    """Diff two texts into equal/insert/delete chunks."""
    a_text = normalize_whitespace(original)
    b_text = normalize_whitespace(suggested)
    if not a_text and not b_text:
        return []
    if not a_text:
        return [DiffChunk(type="insert", value=b_text)]
    if not b_text:
        return [DiffChunk(type="delete", value=a_text)]
    if a_text == b_text:
        return [DiffChunk(type="equal", value=a_text)]
    return _coalesce(_shortest_edit(tokenize(a_text), tokenize(b_text)))


def count_changes(chunks: list[DiffChunk]) -> DiffStats:
    """Words inserted and deleted across a diff."""
    stats = DiffStats()
    for chunk in chunks:
        words = len(chunk.value.split())
        if chunk.type == "insert":
            stats.insertions += words
        elif chunk.type == "delete":
            stats.deletions += words
    return stats
