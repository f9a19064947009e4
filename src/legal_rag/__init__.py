"""legal_rag package

Retrieval-augmented answers over the Argentine Civil and Commercial Code.
Console scripts are defined here so the package stays a handful of modules:
``legal-rag-index``, ``legal-rag-ask`` and ``legal-rag-serve``.
"""
from __future__ import annotations

import argparse
import sys

from .config import Config

__all__ = [
    "build_index_cli",
    "ask_cli",
    "serve_cli",
]


def build_index_cli() -> None:
    from .ingest import ingest_dir, load_embeddings_file

    p = argparse.ArgumentParser(description="Load legal texts into the Chroma collection")
    src = p.add_mutually_exclusive_group()
    src.add_argument("--docs", default=None, help="Directory of .pdf/.txt/.md documents to chunk and embed")
    src.add_argument("--embeddings", default=None, help="JSON file of precomputed {id, text, embedding, metadata}")
    args = p.parse_args()

    cfg = Config()
    if args.embeddings:
        load_embeddings_file(cfg, args.embeddings)
    else:
        ingest_dir(cfg, args.docs or "./docs")


def ask_cli() -> None:
    from .api import build_pipeline
    from .errors import InvalidQuestionError

    p = argparse.ArgumentParser(description="Ask a legal question against the index")
    p.add_argument("question")
    args = p.parse_args()

    pipeline = build_pipeline(Config())
    try:
        result = pipeline.ask(args.question)
    except InvalidQuestionError as e:
        print(e.reason, file=sys.stderr)
        sys.exit(2)

    print("\n=== ANSWER ===\n")
    print(result.answer)
    if result.mode != "rag":
        print(f"\n[mode: {result.mode}]")
    print("\n=== SOURCES ===\n")
    for s in result.sources:
        article = s.get("article")
        src = s.get("source")
        if article:
            print(f"- art. {article} ({src})")
        else:
            print(f"- {src} (chunk {s.get('chunk')})")


def serve_cli() -> None:
    import uvicorn

    cfg = Config()
    uvicorn.run("legal_rag.api:create_app", factory=True, host=cfg.host, port=cfg.port)
