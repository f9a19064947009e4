"""Exception types raised along the ask path.

Each error carries a short ``code``. That code is what callers see in the
``detail`` field of a failed response; the underlying exception text stays in
the server log.
"""
from __future__ import annotations


class LegalRagError(Exception):
    code = "internal_error"


class InvalidQuestionError(LegalRagError):
    code = "invalid_question"

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class RetrievalError(LegalRagError):
    code = "retrieval_unavailable"


class CompletionError(LegalRagError):
    code = "completion_failed"
