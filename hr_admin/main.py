from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from hr_admin.routers import auth, departments, roles
from hr_admin.config import settings
from hr_admin.errors import ErrorKind, ServiceError
from hr_admin.utils.logging_config import setup_logging
from hr_admin.utils.rate_limit import limiter
from hr_admin.middleware.logging_middleware import log_requests


logger = setup_logging()
logger.info("Application starting...")
app = FastAPI(title=settings.app_name, debug=settings.debug)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.middleware("http")(log_requests)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(roles.router)
app.include_router(departments.router)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "data": None}
    )


@app.exception_handler(ServiceError)
def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.kind is ErrorKind.REPOSITORY:
        logger.error(f"{request.method} {request.url.path} fehlgeschlagen: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} abgelehnt ({exc.kind.value}): {exc.message}")
    return _error_response(exc.status_code, exc.public_message)


def _first_error_message(errors) -> str:
    if not errors:
        return "Invalid request"
    message = errors[0].get("msg", "Invalid request")
    # pydantic stellt eigenen ValueError-Meldungen "Value error, " voran
    return message.removeprefix("Value error, ")


@app.exception_handler(RequestValidationError)
def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(400, _first_error_message(exc.errors()))


@app.exception_handler(ValidationError)
def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return _error_response(400, _first_error_message(exc.errors()))


@app.get("/")
def root() -> dict:
        return {"message": "HR Administration läuft!", "app": settings.app_name}

@app.get("/health")
def health() -> dict:
        return {"status": "ok"}
