import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cleanserve.core.config import settings
from cleanserve.core.errors import ServiceError
from cleanserve.api.responses import error_body
from cleanserve.api.v1.api import api_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME)

# CORS: use CORS_ORIGINS from env in production; default to localhost for dev
_default_origins = [
    "http://127.0.0.1:5173", "http://localhost:5173",
    "http://127.0.0.1:3000", "http://localhost:3000",
]
_origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()] if settings.CORS_ORIGINS else _default_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_HTTP_MESSAGE_KEYS = {
    401: "auth.unauthorized",
    403: "auth.insufficient_permissions",
    404: "general.not_found",
}


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    logger.warning("%s %s -> %s %s (%s)", request.method, request.url.path, exc.status_code, exc.code, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message_key, exc.code))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in e.get("loc", ()) if p != "body"), "message": e.get("msg", "")}
        for e in exc.errors()
    ]
    logger.warning("Validation error for %s: %s", request.url.path, errors)
    return JSONResponse(status_code=400, content=jsonable_encoder(error_body("validation.invalid_data", "validation_error", errors)))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    key = _HTTP_MESSAGE_KEYS.get(exc.status_code, "validation.invalid_data")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(key, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=error_body("general.server_error", "server_error"))


app.include_router(api_router)


@app.get("/health")
def health():
    return {"status": "ok"}
