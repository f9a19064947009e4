#!/usr/bin/env python3
import os, sys
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
SRC = os.path.join(ROOT, 'src')
if SRC not in sys.path:
    sys.path.insert(0, SRC)
import uvicorn

from legal_rag.api import create_app
from legal_rag.config import Config


if __name__ == "__main__":
    cfg = Config()
    uvicorn.run(create_app(cfg), host=cfg.host, port=cfg.port)
