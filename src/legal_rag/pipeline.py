"""Request orchestration for a single legal question.

``AskPipeline.ask`` runs validate -> (embed ->) retrieve -> complete and stops
at the first terminal branch: invalid input, no matching documents, or a
generated answer. Two flags select the behaviour:

* ``embed_locally``: compute the query vector here and query Chroma by vector;
  otherwise send the raw text and let the collection embed it.
* ``tolerate_retrieval_failure``: if the vector store raises, answer from the
  LLM alone (``mode="llm_only"``) instead of failing the request.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .config import Config
from .errors import CompletionError, InvalidQuestionError, LegalRagError, RetrievalError
from .logging_setup import logger
from .prompts import (
    NO_CONTEXT_ANSWER,
    SYSTEM_PROMPT,
    SYSTEM_PROMPT_NO_CONTEXT,
    build_user_prompt,
)
from .retrieve import RetrievedDocument, make_context, retrieve
from .validation import validate_question

MODE_RAG = "rag"
MODE_LLM_ONLY = "llm_only"


@dataclass
class AskResult:
    question: str
    answer: str
    sources: List[Dict[str, Any]] = field(default_factory=list)
    mode: str = MODE_RAG
    status: str = "ok"  # ok | no_context | degraded

    def to_payload(self) -> Dict[str, Any]:
        if self.status == "no_context":
            return {"answer": self.answer, "sources": []}
        return {
            "question": self.question,
            "answer": self.answer,
            "sources": self.sources,
            "mode": self.mode,
        }


class AskPipeline:
    def __init__(
        self,
        cfg: Config,
        store,
        completer,
        embedder=None,
        embed_locally: Optional[bool] = None,
        tolerate_retrieval_failure: Optional[bool] = None,
    ):
        self.cfg = cfg
        self.store = store
        self.completer = completer
        self.embedder = embedder
        self.embed_locally = cfg.embed_locally if embed_locally is None else embed_locally
        self.tolerate_retrieval_failure = (
            cfg.llm_only_fallback if tolerate_retrieval_failure is None else tolerate_retrieval_failure
        )
        if self.embed_locally and self.embedder is None:
            raise ValueError("embed_locally requires an embedder")

    def validate(self, question: Any) -> None:
        reason = validate_question(
            question,
            max_chars=self.cfg.max_question_chars,
            block_injection=self.cfg.block_injection,
        )
        if reason:
            raise InvalidQuestionError(reason)

    def _retrieve(self, question: str, vector) -> List[RetrievedDocument]:
        if vector is not None:
            return retrieve(self.store, self.cfg.top_k, embedding=vector)
        return retrieve(self.store, self.cfg.top_k, text=question)

    def ask(self, question: Any) -> AskResult:
        self.validate(question)

        # embedding failures are not a store outage; they propagate as-is
        vector = self.embedder.embed(question) if self.embed_locally else None

        mode = MODE_RAG
        try:
            docs = self._retrieve(question, vector)
        except Exception as e:
            if not self.tolerate_retrieval_failure:
                raise RetrievalError(str(e)) from e
            logger.warning(f"Vector store unavailable, answering without context: {e}")
            mode = MODE_LLM_ONLY
            docs = []

        if mode == MODE_RAG and not docs:
            logger.info("No documents matched the question")
            return AskResult(question=question, answer=NO_CONTEXT_ANSWER, status="no_context")

        if mode == MODE_RAG:
            system = SYSTEM_PROMPT
            user = build_user_prompt(question, make_context(docs))
        else:
            system = SYSTEM_PROMPT_NO_CONTEXT
            user = build_user_prompt(question)

        try:
            answer = self.completer.complete(system, user)
        except LegalRagError:
            raise
        except Exception as e:
            raise CompletionError(str(e)) from e

        logger.info(f"Answered | mode={mode} | docs={len(docs)} | answer_chars={len(answer)}")
        return AskResult(
            question=question,
            answer=answer,
            sources=[d.metadata for d in docs],
            mode=mode,
            status="ok" if mode == MODE_RAG else "degraded",
        )
