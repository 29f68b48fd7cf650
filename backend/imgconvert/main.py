"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from imgconvert.api.routes import router
from imgconvert.config import CORS_ORIGINS, STATIC_DIR, logger as config_logger
from imgconvert.errors import ValidationError

logging.getLogger("uvicorn").setLevel(logging.INFO)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config_logger.info("Converter started, serving client from %s", STATIC_DIR)
    yield
    config_logger.info("Converter shutting down")


app = FastAPI(
    title="JPEG Converter",
    description="Convert JPEG images to PNG, WEBP, GIF or TIFF, one at a time or as a zip.",
    version="1.0.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS if CORS_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """All API errors use the {"error": message} body."""
    return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code, headers=exc.headers)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse({"error": str(exc)}, status_code=400)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse({"error": message}, status_code=400)


app.include_router(router)
# Mounted last so the API routes take precedence over "/".
app.mount("/", StaticFiles(directory=str(STATIC_DIR), html=True, check_dir=False), name="static")


if __name__ == "__main__":
    import uvicorn
    from imgconvert.config import HOST, PORT
    uvicorn.run("imgconvert.main:app", host=HOST, port=PORT, reload=True)
