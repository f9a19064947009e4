import logging
import os

_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

logging.basicConfig(
    level=getattr(logging, _LEVEL, logging.INFO),
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)

# third-party chatter
for _name in ("httpx", "urllib3", "chromadb", "sentence_transformers", "huggingface_hub"):
    logging.getLogger(_name).setLevel(logging.WARNING)

logger = logging.getLogger("legal_rag")
