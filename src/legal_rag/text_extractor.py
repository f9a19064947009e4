from __future__ import annotations
import hashlib
import os
from typing import Dict, Iterable, Tuple

import fitz  # PyMuPDF

from .logging_setup import logger

SUPPORTED_EXTS = (".pdf", ".txt", ".md")


def _clean_text(s: str) -> str:
    # Normalize line endings and drop blank lines; keep line starts so article
    # headings are still at the beginning of a line
    lines = [ln.strip() for ln in s.replace("\r", "\n").split("\n")]
    lines = [ln for ln in lines if ln]
    return "\n".join(lines)


def iter_docs(path: str) -> Iterable[Tuple[str, str, Dict]]:
    """
    Yield (unit_id, text, metadata) for each logical unit:
    - For PDFs: each page becomes a unit
    - For .txt/.md: whole file is one unit
    """
    path = os.path.abspath(path)
    ext = os.path.splitext(path)[1].lower()

    if ext == ".pdf":
        with fitz.open(path) as doc:
            for i, page in enumerate(doc):
                text = _clean_text(page.get_text("text") or "")
                if not text:
                    logger.debug(f"No text layer on {path} page {i + 1}")
                    continue
                meta = {
                    "source": os.path.basename(path),
                    "type": "pdf",
                    "page": i + 1,
                }
                yield (_unit_id(path, i), text, meta)

    elif ext in {".txt", ".md"}:
        with open(path, "r", encoding="utf-8", errors="ignore") as f:
            text = _clean_text(f.read())
        if text:
            yield (_unit_id(path, 0), text, {"source": os.path.basename(path), "type": "text"})


def _unit_id(path: str, idx: int) -> str:
    h = hashlib.sha1(f"{path}:{idx}".encode("utf-8")).hexdigest()[:12]
    return f"{os.path.basename(path)}::{idx + 1}::{h}"
