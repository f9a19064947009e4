from __future__ import annotations
import re
from typing import Any, Optional

MAX_QUESTION_CHARS = 500

INVALID = "Pregunta inválida"
EMPTY = "Pregunta vacía"
TOO_LONG = "Pregunta demasiado larga"
DISALLOWED = "Instrucción no permitida"

# Phrase list only; trivially bypassed by rewording. Not a security boundary.
_INJECTION_PATTERNS = [
    r"ignor[aá]\w*\s+(?:todas\s+)?(?:las\s+)?instrucciones",
    r"olvid[aá]\w*\s+(?:todas\s+)?(?:las\s+)?instrucciones",
    r"ignore\s+(?:all\s+)?(?:the\s+)?(?:previous|prior|above)\s+instructions",
    r"disregard\s+(?:all\s+)?(?:the\s+)?(?:previous|prior|above)",
    r"system\s+prompt",
    r"prompt\s+del\s+sistema",
    r"fing[ií]\s+(?:ser|que\s+sos)",
    r"pretend\s+(?:to\s+be|you\s+are)",
    r"you\s+are\s+now",
    r"jailbreak",
]
_INJECTION_RE = re.compile("|".join(f"(?:{p})" for p in _INJECTION_PATTERNS), re.IGNORECASE)


def looks_like_injection(text: str) -> bool:
    return _INJECTION_RE.search(text) is not None


def validate_question(
    value: Any,
    max_chars: int = MAX_QUESTION_CHARS,
    block_injection: bool = True,
) -> Optional[str]:
    """Return ``None`` for an acceptable question, otherwise the reason it was rejected.

    Checks run in order: type, emptiness after trimming, length, and (optionally)
    the prompt-injection phrase list. The question itself is never modified.
    """
    if not isinstance(value, str):
        return INVALID
    if not value.strip():
        return EMPTY
    if len(value) > max_chars:
        return TOO_LONG
    if block_injection and looks_like_injection(value):
        return DISALLOWED
    return None
