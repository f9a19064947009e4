from __future__ import annotations
import glob
import hashlib
import json
import os
from typing import List

from tqdm import tqdm

from .chunker import attach_metadata, chunk_legal_text
from .config import Config
from .logging_setup import logger
from .store import VectorStore
from .text_extractor import SUPPORTED_EXTS, iter_docs

BATCH = 128  # small batches to keep memory low


def _doc_paths(root: str) -> List[str]:
    root = os.path.abspath(root)
    paths = []
    for ext in SUPPORTED_EXTS:
        paths.extend(glob.glob(os.path.join(root, f"**/*{ext}"), recursive=True))
    return sorted(set(paths))


def _id_for(unit_id: str, chunk_idx: int) -> str:
    raw = f"{unit_id}:{chunk_idx}"
    return hashlib.sha1(raw.encode("utf-8")).hexdigest()


def ingest_dir(cfg: Config, docs_dir: str, store: VectorStore = None) -> int:
    """Chunk every supported document under ``docs_dir`` and add it to the collection.

    Documents are embedded by the collection's embedding function, i.e. the
    same model used for questions. Returns the number of chunks added.
    """
    store = store or VectorStore(cfg)

    paths = _doc_paths(docs_dir)
    if not paths:
        logger.warning(f"No supported documents found in {docs_dir}")
        return 0

    logger.info(f"Found {len(paths)} files. Ingesting -> {cfg.collection}")

    added = 0
    batch_ids, batch_docs, batch_metas = [], [], []
    for pth in tqdm(paths, desc="files"):
        for unit_id, text, meta in iter_docs(pth):
            chunks = chunk_legal_text(text, cfg.chunk_size, cfg.chunk_overlap)
            for i, (chunk, m) in enumerate(attach_metadata(chunks, meta)):
                batch_ids.append(_id_for(unit_id, i))
                batch_docs.append(chunk)
                batch_metas.append(m)
                if len(batch_ids) >= BATCH:
                    store.add(batch_ids, batch_docs, batch_metas)
                    added += len(batch_ids)
                    batch_ids, batch_docs, batch_metas = [], [], []
    if batch_ids:
        store.add(batch_ids, batch_docs, batch_metas)
        added += len(batch_ids)

    logger.info(f"Ingestion complete. Added {added} chunks, collection size: {store.count()}")
    return added


def load_embeddings_file(cfg: Config, path: str, store: VectorStore = None) -> int:
    """Load precomputed records ``[{id, text, embedding, metadata}, ...]`` into the collection.

    The vectors must come from the model configured as ``embed_model``;
    nothing here re-embeds or checks them beyond the record shape.
    """
    store = store or VectorStore(cfg)

    with open(path, "r", encoding="utf-8") as f:
        records = json.load(f)
    if not isinstance(records, list):
        raise ValueError(f"{path}: expected a JSON array of records")

    added = 0
    for start in tqdm(range(0, len(records), BATCH), desc="batches"):
        batch = records[start:start + BATCH]
        for rec in batch:
            missing = {"id", "text", "embedding"} - set(rec)
            if missing:
                raise ValueError(f"{path}: record {rec.get('id', '?')} missing {sorted(missing)}")
        store.add(
            ids=[str(r["id"]) for r in batch],
            documents=[r["text"] for r in batch],
            # chroma rejects empty metadata dicts
            metadatas=[r.get("metadata") or {"source": os.path.basename(path)} for r in batch],
            embeddings=[r["embedding"] for r in batch],
        )
        added += len(batch)

    logger.info(f"Loaded {added} precomputed embeddings into {cfg.collection}")
    return added
