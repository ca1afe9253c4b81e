#!/usr/bin/env python3
"""
Main FastAPI application for the support assistant.
"""

import traceback
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Config
from .controller import Controller, build_controller
from .errors import AppError, NotFoundError, ValidationError
from .rate_limiter import RateLimiter, rate_limit_dependency
from ..data.database import create_tables, engine
from ..schemas.io_models import (
    ChatRequest,
    ChatResponse,
    MessagesResponse,
    SessionCreateRequest,
    SessionInfo,
    SessionListResponse,
    SessionResponse,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)


def get_controller(request: Request) -> Controller:
    return request.app.state.controller


# ---------------------------------------------------------------------------
# Chat routes (mounted at /api/chat and /api/conversations)
# ---------------------------------------------------------------------------
chat_router = APIRouter()


@chat_router.post("", response_model=ChatResponse)
def send_message(body: ChatRequest, controller: Controller = Depends(get_controller)):
    """Send a message and get the assistant's reply."""
    result = controller.handle_message(body.session_id, body.message)
    return ChatResponse(
        reply=result["reply"],
        tokens_used=result["tokens_used"],
        timestamp=result["timestamp"],
    )


@chat_router.get("/{session_id}", response_model=MessagesResponse)
def get_messages(session_id: str, controller: Controller = Depends(get_controller)):
    """All messages for a session in chronological order."""
    sessions = controller.session_manager
    if not sessions.session_exists(session_id):
        raise NotFoundError("Session not found")
    messages = sessions.get_messages(session_id)
    return MessagesResponse(session_id=session_id, messages=messages, total=len(messages))


# ---------------------------------------------------------------------------
# Session routes
# ---------------------------------------------------------------------------
session_router = APIRouter(prefix="/api/sessions")


@session_router.post("")
def create_session(
    response: Response,
    body: Optional[SessionCreateRequest] = None,
    controller: Controller = Depends(get_controller),
):
    """Create a new session, or report that it already exists."""
    requested = body.session_id if body else None
    session_id, created = controller.session_manager.create_session(requested)
    if not created:
        return {"success": True, "sessionId": session_id, "message": "Session already exists"}

    response.status_code = 201
    return {
        "success": True,
        "sessionId": session_id,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }


@session_router.get("", response_model=SessionListResponse)
def list_sessions(controller: Controller = Depends(get_controller)):
    sessions = [SessionInfo(**s) for s in controller.session_manager.list_sessions()]
    return SessionListResponse(sessions=sessions, total=len(sessions))


@session_router.get("/{session_id}", response_model=SessionResponse)
def get_session(session_id: str, controller: Controller = Depends(get_controller)):
    session = controller.session_manager.get_session(session_id)
    if session is None:
        raise NotFoundError("Session not found")
    return SessionResponse(session=SessionInfo(**session))


@session_router.delete("/{session_id}")
def delete_session(session_id: str, controller: Controller = Depends(get_controller)):
    """Delete a session and its messages."""
    if not controller.session_manager.delete_session(session_id):
        raise NotFoundError("Session not found")
    return {
        "success": True,
        "message": "Session deleted successfully",
        "deletedSessionId": session_id,
    }


@session_router.post("/{session_id}/clear")
def clear_session(session_id: str, controller: Controller = Depends(get_controller)):
    """Clear messages in a session but keep the session."""
    if not controller.session_manager.clear_session(session_id):
        raise NotFoundError("Session not found")
    return {
        "success": True,
        "message": "Session messages cleared successfully",
        "sessionId": session_id,
    }


# ---------------------------------------------------------------------------
# Service routes
# ---------------------------------------------------------------------------
service_router = APIRouter()


@service_router.post("/api/docs/reload")
def reload_documentation(controller: Controller = Depends(get_controller)):
    """Re-read the documentation source without restarting."""
    documents = controller.document_store.reload()
    return {"success": True, "documents": len(documents)}


@service_router.get("/health")
def health_check():
    """Health check endpoint."""
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": Config.ENVIRONMENT,
    }


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------
def _error_body(status: int, message: str, **extra) -> dict:
    return {"success": False, "error": {"status": status, "message": message, **extra}}


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        logger.error(f"{exc.__class__.__name__} on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(exc.to_payload(), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        messages = []
        for error in exc.errors():
            msg = str(error.get("msg", "")).removeprefix("Value error, ")
            field = error.get("loc", ())[-1] if error.get("loc") else None
            if msg.startswith(f"{field} ") or field in (None, "body"):
                messages.append(msg)
            else:
                messages.append(f"{field}: {msg}")
        logger.warning(f"Validation error on {request.url.path}: {messages}")
        invalid = ValidationError("; ".join(messages) or None)
        return JSONResponse(invalid.to_payload(), status_code=invalid.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            body = _error_body(404, "Endpoint not found", path=request.url.path, method=request.method)
        else:
            body = _error_body(exc.status_code, str(exc.detail))
        return JSONResponse(body, status_code=exc.status_code, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_exception(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
        logger.error(traceback.format_exc())
        extra = {"stack": traceback.format_exc()} if Config.is_development() else {}
        return JSONResponse(_error_body(500, "Internal Server Error", **extra), status_code=500)


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    if app.state.controller is None:
        create_tables()
        app.state.controller = build_controller()
    Config.debug_print()
    logger.info(f"Server running on http://localhost:{Config.PORT}")
    yield
    engine.dispose()
    logger.info("Database connection closed")


def create_app(
    controller: Optional[Controller] = None,
    rate_limiter: Optional[RateLimiter] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        controller: Prebuilt orchestrator; built from the environment at startup when omitted
        rate_limiter: Per-IP limiter; defaults to Config.RATE_LIMIT_* when enabled
    """
    if rate_limiter is None and Config.RATE_LIMIT_ENABLED:
        rate_limiter = RateLimiter(Config.RATE_LIMIT_REQUESTS, Config.RATE_LIMIT_WINDOW_SECONDS)
    dependencies = [Depends(rate_limit_dependency(rate_limiter))] if rate_limiter else []

    app = FastAPI(
        title="Support Assistant API",
        description="Documentation-grounded customer support chat",
        version="1.0.0",
        lifespan=lifespan,
        dependencies=dependencies,
    )
    app.state.controller = controller

    app.add_middleware(
        CORSMiddleware,
        allow_origins=Config.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(chat_router, prefix="/api/chat")
    app.include_router(chat_router, prefix="/api/conversations")
    app.include_router(session_router)
    app.include_router(service_router)
    register_error_handlers(app)
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=Config.PORT)
