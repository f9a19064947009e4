from __future__ import annotations

import ollama

from .config import Config
from .logging_setup import logger


class Completer:
    """Single-shot chat completion against an Ollama endpoint (local or hosted)."""

    def __init__(self, cfg: Config):
        self.model = cfg.ollama_model
        self.temperature = cfg.temperature
        headers = {}
        if cfg.ollama_api_key:
            headers["Authorization"] = f"Bearer {cfg.ollama_api_key}"
        self.client = ollama.Client(host=cfg.ollama_host, headers=headers)

    def complete(self, system: str, user: str) -> str:
        resp = self.client.chat(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            options={"temperature": self.temperature},
            stream=False,
        )
        txt = resp["message"]["content"] or ""
        logger.debug(f"Completion received | model={self.model} | chars={len(txt)}")
        return txt
