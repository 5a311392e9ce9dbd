# pageqa/main.py
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from pydantic import BaseModel

from pageqa import metrics
from pageqa.context import AppContext
from pageqa.exceptions import TaskNotFoundError, ValidationError
from pageqa.logging_setup import setup_logging
from pageqa.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter()


class TaskCreate(BaseModel):
    url: Optional[str] = None
    question: Optional[str] = None


def get_context(request: Request) -> AppContext:
    return request.app.state.context


@router.get("/")
def root():
    return {"message": "Page Q&A API - Alive"}


@router.get("/health")
def health_check():
    """Liveness only, no dependency checks"""
    return {"status": "ok", "timestamp": datetime.utcnow().isoformat() + "Z"}


@router.post("/api/tasks")
def create_task(payload: TaskCreate, ctx: AppContext = Depends(get_context)):
    """Store a new task and dispatch it; always answers with the freshly created row"""
    url = (payload.url or "").strip()
    question = (payload.question or "").strip()
    if not url or not question:
        raise ValidationError("URL and Question are required")

    task = ctx.dispatcher.submit(url, question)
    return task.to_dict()


@router.get("/api/tasks/recent")
def get_recent_tasks(limit: int = Query(20, ge=1, le=100), ctx: AppContext = Depends(get_context)):
    """Latest N tasks"""
    tasks = ctx.store.recent(limit)
    return {"count": len(tasks), "tasks": [t.to_dict() for t in tasks]}


@router.get("/api/tasks/stats")
def get_tasks_stats(ctx: AppContext = Depends(get_context)):
    """Task counts per status"""
    counts = ctx.store.count_by_status()
    return {"total_tasks": sum(counts.values()), **counts}


@router.get("/api/tasks/{task_id}")
def get_task_status(task_id: int, ctx: AppContext = Depends(get_context)):
    """Current state of a task"""
    return ctx.store.get(task_id).to_dict()


@router.get("/metrics")
def prometheus_metrics():
    """Endpoint for Prometheus"""
    metrics.refresh_process_gauges()
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


def _register_error_handlers(app):
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request, exc):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request, exc):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": _jsonable_errors(exc)},
        )

    @app.exception_handler(TaskNotFoundError)
    async def not_found_handler(request, exc):
        return JSONResponse(status_code=404, content={"error": "Task not found"})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request, exc):
        logger.exception("Error handling %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal Server Error", "details": str(exc) or "Unknown error"},
        )


def _jsonable_errors(exc):
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]


def create_app(context: Optional[AppContext] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the API. Without a context one is built from settings at startup."""
    settings = settings or (context.settings if context else Settings.from_env())

    app = FastAPI(title="Page Q&A", description="Answer questions about web pages")
    app.state.settings = settings
    app.state.context = context
    owns_context = context is None
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info("%s %s", request.method, request.url.path)
        return await call_next(request)

    @app.on_event("startup")
    def startup_event():
        """Runs once when the server starts, not on import"""
        if app.state.context is None:
            setup_logging(settings.log_level)
            app.state.context = AppContext.from_settings(settings)

    @app.on_event("shutdown")
    def shutdown_event():
        if owns_context and app.state.context is not None:
            app.state.context.close()
            app.state.context = None

    _register_error_handlers(app)
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
