import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from voice_api.config import settings
from voice_api.database import Base, get_db, make_engine, make_session_factory
from voice_api.models import ApiKey, RequestLog
from voice_api.model.model import analyze
from voice_api.repositories import ApiKeyRepository, RequestLogRepository, ensure_seed_key
from voice_api.schemas import (
    ApiKeyOut,
    DetectRequest,
    DetectResponse,
    ErrorResponse,
    GenerateKeyRequest,
    RequestLogOut,
    StatsResponse,
)
from voice_api.utils.audio import decode_base64_audio

__version__ = "1.0.0"

logger = logging.getLogger(__name__)


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def require_api_key(
    request: Request,
    x_api_key: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> ApiKey:
    if not x_api_key:
        logger.warning("Request without API key from %s", _client_ip(request))
        raise HTTPException(status_code=401, detail="Missing or invalid API key")

    api_key = ApiKeyRepository(db).get(x_api_key)
    if api_key is None or not api_key.is_active:
        logger.warning("Invalid API key attempt (%s...) from %s", x_api_key[:8], _client_ip(request))
        raise HTTPException(status_code=401, detail="Unauthorized: Invalid API key")
    return api_key


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=str(exc.detail)).model_dump(),
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    message = ", ".join(err["msg"] for err in exc.errors())
    return JSONResponse(status_code=400, content=ErrorResponse(message=message).model_dump())


async def internal_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content=ErrorResponse(message="Internal server error").model_dump())


def create_app(engine=None) -> FastAPI:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if engine is None:
        engine = make_engine(settings.DATABASE_URL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        Base.metadata.create_all(bind=engine)
        db = app.state.session_factory()
        try:
            ensure_seed_key(ApiKeyRepository(db), settings.SEED_API_KEY, settings.SEED_API_OWNER)
        finally:
            db.close()
        yield

    app = FastAPI(title="AI Generated Voice Detection API", version=__version__, lifespan=lifespan)
    app.state.session_factory = make_session_factory(engine)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, internal_error_handler)

    @app.get("/")
    def root():
        return {"status": "ok", "service": app.title, "version": __version__}

    @app.post("/api/voice-detection", response_model=DetectResponse)
    def detect_voice(
        req: DetectRequest,
        request: Request,
        api_key: ApiKey = Depends(require_api_key),
        db: Session = Depends(get_db),
    ):
        try:
            # 1. Decode audio
            audio = decode_base64_audio(req.audioBase64)

            # 2. Score, adjust and classify
            verdict = analyze(audio)

            # 3. Log the request against the caller's key
            RequestLogRepository(db).insert(RequestLog(
                api_key_id=api_key.id,
                language=req.language,
                classification=verdict.classification,
                confidence_score=verdict.confidence_score,
                explanation=verdict.explanation,
                client_ip=_client_ip(request),
            ))
        except Exception:
            db.rollback()
            logger.exception("Voice detection failed for key id %s", api_key.id)
            raise HTTPException(status_code=500, detail="Internal server error")

        logger.info(
            "Classified %d bytes (%s) as %s (confidence: %.2f)",
            verdict.features.size, req.language, verdict.classification, verdict.confidence_score,
        )
        return DetectResponse(
            language=req.language,
            classification=verdict.classification,
            confidenceScore=verdict.confidence_score,
            explanation=verdict.explanation,
        )

    # No admin authentication on these routes yet; keep them off public deployments.
    @app.post("/api/admin/generate-key", response_model=ApiKeyOut, status_code=201)
    def generate_key(req: GenerateKeyRequest, db: Session = Depends(get_db)):
        try:
            api_key = ApiKeyRepository(db, key_prefix=settings.API_KEY_PREFIX).create(req.owner)
        except Exception:
            db.rollback()
            logger.exception("Failed to create API key for %s", req.owner)
            raise HTTPException(status_code=500, detail="Failed to create key")
        logger.info("Created API key id %s for %s", api_key.id, api_key.owner)
        return api_key

    @app.get("/api/admin/stats", response_model=StatsResponse)
    def get_stats(db: Session = Depends(get_db)):
        try:
            stats = RequestLogRepository(db).stats(settings.RECENT_LOGS_LIMIT)
        except Exception:
            logger.exception("Failed to fetch stats")
            raise HTTPException(status_code=500, detail="Failed to fetch stats")
        return StatsResponse(
            totalRequests=stats["totalRequests"],
            aiDetected=stats["aiDetected"],
            humanDetected=stats["humanDetected"],
            recentLogs=[RequestLogOut.model_validate(log) for log in stats["recentLogs"]],
        )

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run("voice_api.main:app", host="0.0.0.0", port=8000, reload=True)
