
import logging
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from docmanager.middleware.ratelimit import RateLimitMiddleware, rate_limit_key
from docmanager.config import settings
from docmanager.db.session import SessionLocal, init_db
from docmanager.db.seed import seed_dev_data
from docmanager.auth.routes import router as auth_router
from docmanager.documents.routes import router as documents_router
from docmanager.tags.routes import router as tags_router
from docmanager.users.routes import router as users_router
from docmanager.utils.logging import configure_logging

logger = logging.getLogger(__name__)

async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "detail": {
                "error": "validation_error",
                "message": "Request validation failed",
                "fields": jsonable_encoder(exc.errors()),
            }
        },
    )

async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": {"error": "internal_error", "message": "Internal server error"}},
    )

def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title=settings.app_name)

    app.add_middleware(
        RateLimitMiddleware,
        window_seconds=settings.rate_limit_window_seconds,
        max_calls=settings.rate_limit_max_calls,
        key_func=rate_limit_key,
        include_path_prefixes=("/documents/upload",),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        max_age=3600,
    )

    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(auth_router)
    app.include_router(documents_router)
    app.include_router(tags_router)
    app.include_router(users_router)

    @app.on_event("startup")
    def on_startup():
        init_db()
        if settings.app_env == "dev" and settings.seed_dev_data:
            with SessionLocal() as db:
                seed_dev_data(db)

    @app.get("/", tags=["root"])
    def root():
        return {"name": settings.app_name, "env": settings.app_env}

    return app

app = create_app()
