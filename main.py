import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from typing import Optional

import config
from database import open_engine, create_db_and_tables
from errors import TaskError
from logging_setup import setup_logging
from routes import tasks
from schemas import ApiResponse
from store import TaskStore

logger = logging.getLogger(__name__)


def error_response(status_code: int, code: str, message: str, details: Optional[list] = None) -> JSONResponse:
    error = {"code": code, "message": message}
    if details:
        error["details"] = details
    body = ApiResponse(success=False, error=error)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def create_app(database_url: Optional[str] = None) -> FastAPI:
    """
    Build the application

    The database engine is opened on startup and disposed on shutdown, so
    importing this module never touches storage.

    Args:
        database_url: Overrides DATABASE_URL from the environment

    Returns:
        Configured FastAPI app
    """
    setup_logging(config.LOG_LEVEL)

    app = FastAPI(
        title="Task Tracker API",
        description="CRUD service for title/description/status task records",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(tasks.router, prefix="/tasks", tags=["tasks"])

    @app.on_event("startup")
    def on_startup():
        """Open the database and create tables on startup"""
        engine = open_engine(database_url or config.DATABASE_URL)
        create_db_and_tables(engine)
        app.state.store = TaskStore(engine)
        logger.info("Tasks table ready")

    @app.on_event("shutdown")
    def on_shutdown():
        store = getattr(app.state, "store", None)
        if store is not None:
            store.close()

    @app.exception_handler(TaskError)
    async def task_error_handler(request: Request, exc: TaskError):
        if exc.status_code >= 500:
            logger.error(
                "%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc
            )
        return error_response(exc.status_code, exc.code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        return error_response(
            status.HTTP_400_BAD_REQUEST, "validation_error", "Invalid request", details
        )

    @app.get("/")
    def read_root():
        """Root endpoint redirects to the task list"""
        return RedirectResponse(url="/tasks", status_code=status.HTTP_303_SEE_OTHER)

    @app.get("/health")
    def health_check():
        """Health check endpoint"""
        return {"status": "healthy"}

    return app


# Module-level app for `uvicorn main:app`
app = create_app()
