"""HTTP surface: ``GET /health`` and a rate-limited ``POST /ask``."""
from __future__ import annotations
import time
from typing import Any, Optional

from fastapi import BackgroundTasks, Body, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Config
from .embeddings import Embedder
from .errors import InvalidQuestionError, LegalRagError
from .generate import Completer
from .logging_setup import logger
from .pipeline import AskPipeline
from .querylog import QueryLogger
from .ratelimit import FixedWindowRateLimiter, RateLimitExceeded
from .store import VectorStore
from .validation import INVALID

SERVICE_NAME = "legal-backend"
UNAVAILABLE = "Servicio temporalmente no disponible"
RATE_LIMITED = "Demasiadas consultas, intentá de nuevo más tarde."


def build_pipeline(cfg: Config) -> AskPipeline:
    embedder = Embedder(cfg) if cfg.embed_locally else None
    return AskPipeline(cfg, store=VectorStore(cfg), completer=Completer(cfg), embedder=embedder)


def client_ip(request: Request, trust_proxy: bool) -> str:
    # one trusted hop: only the entry our proxy appended (the last one) is reliable
    if trust_proxy:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[-1].strip()
    return request.client.host if request.client else "unknown"


def create_app(
    cfg: Optional[Config] = None,
    pipeline: Optional[AskPipeline] = None,
    query_logger: Optional[QueryLogger] = None,
    limiter: Optional[FixedWindowRateLimiter] = None,
) -> FastAPI:
    cfg = cfg or Config()
    pipeline = pipeline or build_pipeline(cfg)
    qlog = query_logger or QueryLogger(cfg.query_log_path)
    limiter = limiter or FixedWindowRateLimiter(cfg.rate_limit_max_requests, cfg.rate_limit_window_seconds)

    app = FastAPI(title="Legal RAG API")

    @app.middleware("http")
    async def limit_and_time(request: Request, call_next):
        start = time.perf_counter()
        if request.method == "POST" and request.url.path == "/ask":
            try:
                limiter.hit(client_ip(request, cfg.trust_proxy))
            except RateLimitExceeded as e:
                logger.warning(f"Rate limit hit | ip={client_ip(request, cfg.trust_proxy)}")
                return JSONResponse(
                    status_code=429,
                    content={"error": RATE_LIMITED},
                    headers={"Retry-After": str(e.retry_after)},
                )
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"{request.method} {request.url.path} | status={response.status_code} | {elapsed_ms:.1f}ms")
        return response

    # outermost, so limiter 429s also carry CORS headers
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origin_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def bad_body(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": INVALID})

    @app.get("/health")
    def health():
        return {"status": "ok", "service": SERVICE_NAME}

    @app.post("/ask")
    def ask(request: Request, background_tasks: BackgroundTasks, payload: Any = Body(None)):
        ip = client_ip(request, cfg.trust_proxy)
        question = payload.get("question") if isinstance(payload, dict) else None
        question_length = len(question) if isinstance(question, str) else None

        try:
            result = pipeline.ask(question)
        except InvalidQuestionError as e:
            background_tasks.add_task(
                qlog.log, ip=ip, status="invalid", error=e.reason, question_length=question_length
            )
            return JSONResponse(status_code=400, content={"error": e.reason})
        except Exception as e:
            code = e.code if isinstance(e, LegalRagError) else LegalRagError.code
            logger.exception(f"/ask failed | code={code}")
            background_tasks.add_task(
                qlog.log, ip=ip, status="error", error=code, question_length=question_length
            )
            return JSONResponse(status_code=503, content={"error": UNAVAILABLE, "detail": code})

        background_tasks.add_task(qlog.log, ip=ip, status=result.status, question_length=question_length)
        return JSONResponse(result.to_payload())

    return app
