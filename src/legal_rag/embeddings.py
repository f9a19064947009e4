from __future__ import annotations
import threading
from typing import List

from chromadb.utils import embedding_functions

from .config import Config
from .logging_setup import logger

_lock = threading.Lock()
_functions = {}


def get_embedding_function(model_name: str):
    """Process-wide SentenceTransformer embedding function, built once per model name.

    The same function is attached to the collection (so documents and raw-text
    queries are embedded identically) and used by ``Embedder`` for precomputed
    query vectors. all-MiniLM-L6-v2 mean-pools token vectors; we L2-normalize.
    """
    ef = _functions.get(model_name)
    if ef is not None:
        return ef
    with _lock:
        ef = _functions.get(model_name)
        if ef is None:
            logger.info(f"Loading embedding model {model_name}")
            ef = embedding_functions.SentenceTransformerEmbeddingFunction(
                model_name=model_name,
                normalize_embeddings=True,
            )
            _functions[model_name] = ef
    return ef


class Embedder:
    def __init__(self, cfg: Config):
        self.model_name = cfg.embed_model

    def embed(self, text: str) -> List[float]:
        ef = get_embedding_function(self.model_name)
        vectors = ef([text])
        return [float(x) for x in vectors[0]]
