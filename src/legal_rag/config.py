import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Config:
    # embeddings / vector store
    embed_model: str = os.getenv("RAG_EMBED_MODEL", "sentence-transformers/all-MiniLM-L6-v2")
    collection: str = os.getenv("RAG_COLLECTION", "jurisprudencia")
    db_dir: str = os.getenv("RAG_DB_DIR", "./vectorstore")
    chroma_host: str = os.getenv("CHROMA_HOST", "")  # empty -> local persistent store
    chroma_port: int = int(os.getenv("CHROMA_PORT", "443"))
    chroma_ssl: bool = _env_bool("CHROMA_SSL", "true")
    chunk_size: int = int(os.getenv("RAG_CHUNK_SIZE", "1200"))
    chunk_overlap: int = int(os.getenv("RAG_CHUNK_OVERLAP", "200"))
    top_k: int = int(os.getenv("RAG_TOP_K", "3"))

    # request handling
    max_question_chars: int = int(os.getenv("RAG_MAX_QUESTION_CHARS", "500"))
    embed_locally: bool = _env_bool("RAG_EMBED_LOCALLY", "true")
    llm_only_fallback: bool = _env_bool("RAG_LLM_ONLY_FALLBACK", "true")
    block_injection: bool = _env_bool("RAG_BLOCK_INJECTION", "true")

    # completion
    ollama_host: str = os.getenv("OLLAMA_HOST", "https://ollama.com")
    ollama_model: str = os.getenv("OLLAMA_MODEL", "llama3.1:8b")
    ollama_api_key: str = os.getenv("OLLAMA_API_KEY", "")
    temperature: float = float(os.getenv("LLM_TEMPERATURE", "0.2"))

    # http edge
    rate_limit_window_seconds: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", str(15 * 60)))
    rate_limit_max_requests: int = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "30"))
    trust_proxy: bool = _env_bool("TRUST_PROXY", "true")
    cors_origins: str = os.getenv("CORS_ORIGINS", "*")  # comma separated
    query_log_path: str = os.getenv("QUERY_LOG_PATH", "./logs/queries.log")
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "3000"))

    @property
    def cors_origin_list(self):
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
