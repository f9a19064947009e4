from __future__ import annotations
import os
import threading
from typing import Any, Dict, List, Optional, Sequence

import chromadb

from .config import Config
from .embeddings import get_embedding_function
from .logging_setup import logger


def make_client(cfg: Config):
    if cfg.chroma_host:
        logger.info(f"Connecting to Chroma at {cfg.chroma_host}:{cfg.chroma_port} (ssl={cfg.chroma_ssl})")
        return chromadb.HttpClient(host=cfg.chroma_host, port=cfg.chroma_port, ssl=cfg.chroma_ssl)
    os.makedirs(cfg.db_dir, exist_ok=True)
    return chromadb.PersistentClient(path=cfg.db_dir)


class VectorStore:
    """Lazily connected handle on the Chroma collection.

    The client and collection are created on first use and then reused for the
    life of the process. There is no reconnect: if the first connection fails,
    the next call simply tries again.
    """

    def __init__(self, cfg: Config):
        self.cfg = cfg
        self._lock = threading.Lock()
        self._collection = None

    def collection(self):
        if self._collection is not None:
            return self._collection
        with self._lock:
            if self._collection is None:
                client = make_client(self.cfg)
                self._collection = client.get_or_create_collection(
                    name=self.cfg.collection,
                    embedding_function=get_embedding_function(self.cfg.embed_model),
                )
                logger.info(f"Collection '{self.cfg.collection}' ready")
        return self._collection

    def query(
        self,
        k: int,
        embedding: Optional[Sequence[float]] = None,
        text: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Raw Chroma query result for a single vector or a single text."""
        if (embedding is None) == (text is None):
            raise ValueError("query needs exactly one of embedding or text")
        col = self.collection()
        if embedding is not None:
            return col.query(query_embeddings=[list(embedding)], n_results=k)
        return col.query(query_texts=[text], n_results=k)

    def add(
        self,
        ids: List[str],
        documents: List[str],
        metadatas: List[Dict[str, Any]],
        embeddings: Optional[List[List[float]]] = None,
    ) -> None:
        col = self.collection()
        if embeddings is None:
            col.add(ids=ids, documents=documents, metadatas=metadatas)
        else:
            col.add(ids=ids, documents=documents, metadatas=metadatas, embeddings=embeddings)

    def count(self) -> int:
        return self.collection().count()
