import time
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from dotenv import load_dotenv

# Load environment variables from .env file before anything else
load_dotenv()

from app.core.config import settings
from app.core.logging import setup_logging, request_id_ctx
from app.core.errors import IntegrityConflict, PlatformError, ValidationError
from app.core.db import engine, init_models
from app.api.router import api_router


setup_logging()
app = FastAPI(title=settings.APP_NAME)

logger = logging.getLogger(__name__)

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    response = await call_next(request)

    process_time = (time.time() - start_time) * 1000
    formatted_process_time = f"{process_time:.2f}ms"

    logger.info(
        f"Request: {request.method} {request.url.path} - Response: {response.status_code} - Time: {formatted_process_time}"
    )

    return response

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id", "-")
    request_id_ctx.set(rid)
    response = await call_next(request)
    return response

@app.exception_handler(PlatformError)
async def platform_exception_handler(request: Request, exc: PlatformError):
    logger.warning(f"{request.method} {request.url.path} failed: {exc}")
    content = {"code": exc.code, "message": exc.message}
    if isinstance(exc, ValidationError):
        content["errors"] = exc.errors
    elif exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)

@app.exception_handler(IntegrityError)
async def integrity_exception_handler(request: Request, exc: IntegrityError):
    # unique/foreign-key violations the services did not anticipate (e.g. concurrent writers)
    logger.warning(f"{request.method} {request.url.path} violated a constraint: {exc.orig}")
    return JSONResponse(
        status_code=IntegrityConflict.status_code,
        content={"code": IntegrityConflict.default_code, "message": "Data integrity issue"},
    )

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.critical(f"Unhandled exception for request {request.method} {request.url.path}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"message": "An internal server error occurred."},
    )


@app.on_event("startup")
async def on_startup():
    await init_models()

@app.on_event("shutdown")
async def on_shutdown():
    await engine.dispose()


app.include_router(api_router, prefix=settings.API_PREFIX)
