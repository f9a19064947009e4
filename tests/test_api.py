import json

import pytest
from fastapi.testclient import TestClient

from conftest import FakeCompleter, FakeStore, chroma_result
from legal_rag.api import RATE_LIMITED, UNAVAILABLE, create_app
from legal_rag.pipeline import AskPipeline
from legal_rag.prompts import NO_CONTEXT_ANSWER, UNGROUNDED_MARKER
from legal_rag.ratelimit import FixedWindowRateLimiter

QUESTION = "¿Qué dice el artículo 1710?"


def make_client(cfg, store, completer, embedder, **kwargs):
    pipeline = AskPipeline(cfg, store, completer, embedder, **kwargs)
    return TestClient(create_app(cfg, pipeline=pipeline))


def read_log(cfg):
    with open(cfg.query_log_path, encoding="utf-8") as f:
        return [json.loads(line) for line in f]


def test_health(cfg, store, completer, embedder):
    client = make_client(cfg, store, completer, embedder)
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "service": "legal-backend"}


def test_ask_grounded(cfg, store, completer, embedder):
    client = make_client(cfg, store, completer, embedder)
    r = client.post("/ask", json={"question": QUESTION})

    assert r.status_code == 200
    body = r.json()
    assert body["question"] == QUESTION
    assert UNGROUNDED_MARKER not in body["answer"]
    assert body["sources"] == [{"article": "1710", "source": "ccyc"}]
    assert body["mode"] == "rag"

    records = read_log(cfg)
    assert len(records) == 1
    assert records[0]["status"] == "ok"
    assert records[0]["ip"] == "testclient"
    assert records[0]["question_length"] == len(QUESTION)
    assert "ts" in records[0]


def test_empty_question(cfg, store, completer, embedder):
    client = make_client(cfg, store, completer, embedder)
    r = client.post("/ask", json={"question": ""})

    assert r.status_code == 400
    assert r.json() == {"error": "Pregunta vacía"}
    assert store.calls == []
    assert embedder.calls == []
    assert completer.calls == []
    assert read_log(cfg)[0]["status"] == "invalid"


def test_too_long_question(cfg, store, completer, embedder):
    client = make_client(cfg, store, completer, embedder)
    r = client.post("/ask", json={"question": "a" * 501})
    assert r.status_code == 400
    assert r.json() == {"error": "Pregunta demasiado larga"}
    assert completer.calls == []


@pytest.mark.parametrize("payload", [{}, {"question": 12}, {"question": None}, ["q"], "texto"])
def test_invalid_payloads(cfg, store, completer, embedder, payload):
    client = make_client(cfg, store, completer, embedder)
    r = client.post("/ask", json=payload)
    assert r.status_code == 400
    assert r.json() == {"error": "Pregunta inválida"}
    assert store.calls == []


def test_missing_question_logs_null_length(cfg, store, completer, embedder):
    client = make_client(cfg, store, completer, embedder)
    client.post("/ask", json={})
    assert read_log(cfg)[0]["question_length"] is None


def test_malformed_json(cfg, store, completer, embedder):
    client = make_client(cfg, store, completer, embedder)
    r = client.post("/ask", content=b"{not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json() == {"error": "Pregunta inválida"}


def test_no_context(cfg, completer, embedder):
    client = make_client(cfg, FakeStore(chroma_result([])), completer, embedder)
    r = client.post("/ask", json={"question": QUESTION})

    assert r.status_code == 200
    assert r.json() == {"answer": NO_CONTEXT_ANSWER, "sources": []}
    assert completer.calls == []
    assert read_log(cfg)[0]["status"] == "no_context"


def test_store_down_with_fallback(cfg, completer, embedder):
    store = FakeStore(error=ConnectionError("connection refused"))
    client = make_client(cfg, store, completer, embedder, tolerate_retrieval_failure=True)
    r = client.post("/ask", json={"question": QUESTION})

    assert r.status_code == 200
    body = r.json()
    assert body["mode"] == "llm_only"
    assert body["sources"] == []
    assert read_log(cfg)[0]["status"] == "degraded"


def test_store_down_without_fallback(cfg, completer, embedder):
    store = FakeStore(error=ConnectionError("connection refused to 10.0.0.7"))
    client = make_client(cfg, store, completer, embedder, tolerate_retrieval_failure=False)
    r = client.post("/ask", json={"question": QUESTION})

    assert r.status_code == 503
    assert r.json() == {"error": UNAVAILABLE, "detail": "retrieval_unavailable"}
    assert "10.0.0.7" not in r.text

    record = read_log(cfg)[0]
    assert record["status"] == "error"
    assert record["error"] == "retrieval_unavailable"


def test_completion_failure(cfg, store, embedder):
    completer = FakeCompleter(error=RuntimeError("invalid api key sk-123"))
    client = make_client(cfg, store, completer, embedder)
    r = client.post("/ask", json={"question": QUESTION})

    assert r.status_code == 503
    assert r.json() == {"error": UNAVAILABLE, "detail": "completion_failed"}
    assert "sk-123" not in r.text


def test_unexpected_failure_is_opaque(cfg, store, completer):
    class BrokenEmbedder:
        def embed(self, text):
            raise RuntimeError("tokenizer exploded")

    client = make_client(cfg, store, completer, BrokenEmbedder())
    r = client.post("/ask", json={"question": QUESTION})
    assert r.status_code == 503
    assert r.json()["detail"] == "internal_error"


def test_rate_limit_blocks_31st_request(cfg, store, completer, embedder):
    client = make_client(cfg, store, completer, embedder)
    for _ in range(30):
        assert client.post("/ask", json={"question": ""}).status_code == 400

    r = client.post("/ask", json={"question": ""})
    assert r.status_code == 429
    assert r.json() == {"error": RATE_LIMITED}
    assert int(r.headers["Retry-After"]) > 0
    # the limited request never reached the handler
    assert len(read_log(cfg)) == 30


def test_rate_limit_is_per_caller_and_scoped_to_ask(cfg, store, completer, embedder):
    pipeline = AskPipeline(cfg, store, completer, embedder)
    limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=900)
    client = TestClient(create_app(cfg, pipeline=pipeline, limiter=limiter))

    assert client.post("/ask", json={"question": QUESTION}, headers={"X-Forwarded-For": "1.1.1.1"}).status_code == 200
    assert client.post("/ask", json={"question": QUESTION}, headers={"X-Forwarded-For": "1.1.1.1"}).status_code == 429
    assert client.post("/ask", json={"question": QUESTION}, headers={"X-Forwarded-For": "2.2.2.2"}).status_code == 200
    assert client.get("/health").status_code == 200


def test_forwarded_for_ignored_without_trust_proxy(cfg, store, completer, embedder):
    cfg.trust_proxy = False
    client = make_client(cfg, store, completer, embedder)
    client.post("/ask", json={"question": QUESTION}, headers={"X-Forwarded-For": "9.9.9.9"})
    assert read_log(cfg)[0]["ip"] == "testclient"


def test_rate_limit_keys_on_proxy_appended_hop(cfg, store, completer, embedder):
    client = make_client(cfg, store, completer, embedder)
    statuses = [
        client.post(
            "/ask",
            json={"question": ""},
            headers={"X-Forwarded-For": f"10.0.0.{i}, 203.0.113.7"},
        ).status_code
        for i in range(40)
    ]
    assert statuses[:30] == [400] * 30
    assert statuses[30:] == [429] * 10
    assert {r["ip"] for r in read_log(cfg)} == {"203.0.113.7"}
