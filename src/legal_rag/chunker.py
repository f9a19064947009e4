from __future__ import annotations
import re
from typing import List, Optional, Tuple

# "ARTÍCULO 1710.- Deber de prevención", "Artículo 1710 bis", "ART. 12"
ARTICLE_RE = re.compile(
    r"^[ \t]*(?:art[ií]culo|art\.)\s+(\d+(?:\s+bis)?)\b",
    re.IGNORECASE | re.MULTILINE,
)


def chunk_text(text: str, chunk_size: int = 1200, overlap: int = 200) -> List[str]:
    """
    Length-based chunking with overlap, used for text without article headings
    and for articles longer than ``chunk_size``.
    """
    if not text:
        return []
    text = text.strip()
    n = len(text)
    chunks = []
    step = max(1, chunk_size - overlap)
    for start in range(0, n, step):
        end = min(n, start + chunk_size)
        chunk = text[start:end]
        if chunk:
            chunks.append(chunk)
        if end >= n:
            break
    return chunks


def split_articles(text: str) -> List[Tuple[Optional[str], str]]:
    """Split legal code text at article headings.

    Returns ``(article_number, article_text)`` pairs; the heading stays in the
    text. Anything before the first heading comes back with ``None`` as the
    article, and text with no headings at all is one ``(None, text)`` pair.
    """
    text = (text or "").strip()
    if not text:
        return []
    matches = list(ARTICLE_RE.finditer(text))
    if not matches:
        return [(None, text)]

    out = []
    preamble = text[: matches[0].start()].strip()
    if preamble:
        out.append((None, preamble))
    for i, m in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
        body = text[m.start():end].strip()
        number = re.sub(r"\s+", " ", m.group(1)).lower()
        out.append((number, body))
    return out


def chunk_legal_text(text: str, chunk_size: int = 1200, overlap: int = 200) -> List[Tuple[str, dict]]:
    out = []
    for article, body in split_articles(text):
        pieces = [body] if len(body) <= chunk_size else chunk_text(body, chunk_size, overlap)
        for piece in pieces:
            meta = {"article": article} if article else {}
            out.append((piece, meta))
    return out


def attach_metadata(chunks: List[Tuple[str, dict]], base_meta: dict) -> List[Tuple[str, dict]]:
    out = []
    for i, (ch, extra) in enumerate(chunks):
        meta = dict(base_meta)
        meta.update(extra)
        meta["chunk"] = i + 1
        meta["char_len"] = len(ch)
        out.append((ch, meta))
    return out
