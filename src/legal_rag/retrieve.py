from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence


@dataclass
class RetrievedDocument:
    text: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    distance: Optional[float] = None


def parse_query_result(res: Dict[str, Any], k: int) -> List[RetrievedDocument]:
    # chroma returns lists for each query; we only do one query
    docs = (res.get("documents") or [[]])[0] or []
    metas = (res.get("metadatas") or [[]])[0] or []
    dists = (res.get("distances") or [[]])[0] or []

    out = []
    for i, text in enumerate(docs):
        if text is None:
            continue
        meta = metas[i] if i < len(metas) and metas[i] else {}
        dist = dists[i] if i < len(dists) else None
        out.append(RetrievedDocument(text=text, metadata=dict(meta), distance=dist))

    # smaller distance is more similar; chroma already orders, keep it stable
    out.sort(key=lambda d: d.distance if d.distance is not None else float("inf"))
    return out[:k]


def retrieve(store, k: int, embedding: Optional[Sequence[float]] = None,
             text: Optional[str] = None) -> List[RetrievedDocument]:
    res = store.query(k, embedding=embedding, text=text)
    return parse_query_result(res, k)


def make_context(docs: List[RetrievedDocument]) -> str:
    return "\n\n".join(d.text for d in docs)
