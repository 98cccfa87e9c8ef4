# duell/main.py

import asyncio
import sys
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import (
    http_exception_handler as default_http_handler,
    request_validation_exception_handler as default_validation_handler,
)
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from duell.core.constants import (
    ALLOWED_ORIGINS, SEED_DEFAULT_QUESTIONS, UVICORN_HOST, UVICORN_PORT, UVICORN_LOG_LEVEL
)
from duell.core.database import init_db, get_db_context
from duell.core.logger import logger
from duell.core.responses import error, ErrorCodes
from duell.core.utils import get_client_ip
from duell.routers import admin, auth, game, health, questions
from duell.services import auth_service, seed_service
from duell.tasks.background import start_background_tasks, stop_background_tasks

# polled by load balancers; logged at DEBUG only
QUIET_PATHS = {"/api/health"}


def _log_uncaught(exc_type, exc, tb):
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc, tb)
    else:
        logger.opt(exception=(exc_type, exc, tb)).critical("Uncaught exception, process terminating")


sys.excepthook = _log_uncaught


def _log_loop_error(_loop, context):
    exc = context.get("exception")
    (logger.opt(exception=exc) if exc else logger).error(f"Event loop error | {context.get('message', '')}")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    logger.info("Das Duell um die Geld: Backend startet")
    init_db()
    with get_db_context() as db:
        auth_service.seed_admin(db)
        if SEED_DEFAULT_QUESTIONS:
            seed_service.seed_questions(db)
    asyncio.get_running_loop().set_exception_handler(_log_loop_error)
    tasks = start_background_tasks()
    logger.success(f"Backend bereit | sweeper={[t.get_name() for t in tasks]}")
    yield
    await stop_background_tasks(tasks)
    logger.info("Backend beendet")


app = FastAPI(title="Das Duell um die Geld API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(StarletteHTTPException)
async def log_http_exception(request: Request, exc: StarletteHTTPException):
    level = "ERROR" if exc.status_code >= 500 else "WARNING"
    logger.log(level, f"{request.method} {request.url.path} -> {exc.status_code} | {exc.detail}")
    return await default_http_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def log_validation_error(request: Request, exc: RequestValidationError):
    fields = [".".join(str(p) for p in e.get("loc", ())) for e in exc.errors()]
    logger.warning(f"{request.method} {request.url.path} -> 422 | fields={fields}")
    return await default_validation_handler(request, exc)


@app.exception_handler(Exception)
async def internal_error(request: Request, exc: Exception):
    logger.opt(exception=exc).error(f"{request.method} {request.url.path} -> 500")
    return JSONResponse(status_code=500, content={"detail": error(ErrorCodes.INTERNAL_ERROR, "Interner Serverfehler")})


@app.middleware("http")
async def access_log(request: Request, call_next):
    started = time.perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        response.headers["X-Process-Time"] = f"{time.perf_counter() - started:.6f}s"
        return response
    finally:
        millis = (time.perf_counter() - started) * 1000
        level = "DEBUG" if request.url.path in QUIET_PATHS else "INFO"
        logger.log(level, f"[{get_client_ip(request)}] {request.method} {request.url.path} "
                          f"-> {status_code} | {millis:.1f} ms")


app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
    expose_headers=["Retry-After", "Content-Disposition"],
)

for router in (auth.router, questions.router, admin.router, game.router, health.router):
    app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("duell.main:app", host=UVICORN_HOST, port=UVICORN_PORT, log_level=UVICORN_LOG_LEVEL)
