"""Shared fixtures: fake vector store, embedder and completer so nothing hits the network."""
import os
import sys

import pytest

# Ensure src is on path for imports
ROOT = os.path.dirname(os.path.abspath(__file__))
SRC = os.path.join(os.path.dirname(ROOT), 'src')
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from legal_rag.config import Config  # noqa: E402

ARTICLE_1710 = (
    "ARTÍCULO 1710.- Deber de prevención del daño. Toda persona tiene el deber, "
    "en cuanto de ella dependa, de: a) evitar causar un daño no justificado; ..."
)


def chroma_result(docs, metas=None, dists=None):
    metas = metas if metas is not None else [{"article": str(i)} for i in range(len(docs))]
    dists = dists if dists is not None else [0.1 * (i + 1) for i in range(len(docs))]
    return {"ids": [[f"id{i}" for i in range(len(docs))]], "documents": [docs],
            "metadatas": [metas], "distances": [dists]}


class FakeStore:
    def __init__(self, result=None, error=None):
        self.result = result if result is not None else chroma_result([])
        self.error = error
        self.calls = []
        self.added = []

    def query(self, k, embedding=None, text=None):
        self.calls.append({"k": k, "embedding": embedding, "text": text})
        if self.error:
            raise self.error
        return self.result

    def add(self, ids, documents, metadatas, embeddings=None):
        self.added.append({"ids": ids, "documents": documents,
                           "metadatas": metadatas, "embeddings": embeddings})

    def count(self):
        return sum(len(a["ids"]) for a in self.added)


class FakeEmbedder:
    def __init__(self):
        self.calls = []

    def embed(self, text):
        self.calls.append(text)
        return [0.1, 0.2, 0.3]


class FakeCompleter:
    def __init__(self, answer="El artículo 1710 establece el deber de prevención del daño.", error=None):
        self.answer = answer
        self.error = error
        self.calls = []

    def complete(self, system, user):
        self.calls.append({"system": system, "user": user})
        if self.error:
            raise self.error
        return self.answer


@pytest.fixture
def cfg(tmp_path):
    return Config(
        top_k=3,
        temperature=0.2,
        max_question_chars=500,
        embed_locally=True,
        llm_only_fallback=True,
        block_injection=True,
        rate_limit_window_seconds=900,
        rate_limit_max_requests=30,
        trust_proxy=True,
        cors_origins="*",
        query_log_path=str(tmp_path / "logs" / "queries.log"),
    )


@pytest.fixture
def store():
    return FakeStore(chroma_result([ARTICLE_1710], [{"article": "1710", "source": "ccyc"}]))


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def completer():
    return FakeCompleter()
