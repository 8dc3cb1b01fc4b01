import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from marketplace.config import get_settings, DEFAULT_SESSION_SECRET
from marketplace.database import engine, Base
from marketplace.errors import (
    MarketplaceError, ValidationFailed, AuthenticationRequired, AuthorizationDenied, NotFound
)
from marketplace.middleware import MethodOverrideMiddleware
from marketplace.routers import listings_router, reviews_router, users_router
from marketplace.web import REDIRECT_KEY, flash, render
from marketplace import models  # noqa: F401

settings = get_settings()

log_level = logging.DEBUG if settings.debug else logging.INFO
logging.basicConfig(
    level=log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def init_db() -> bool:
    """Создает таблицы. Без БД приложение продолжает работать."""
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        logger.error(f"Error connecting to database: {e}")
        logger.warning("Starting server without database connection...")
        return False
    logger.info("Connected to database")
    return True


init_db()

if settings.session_secret == DEFAULT_SESSION_SECRET:
    logger.warning("SESSION_SECRET is not set, using the development default")

app = FastAPI(
    title=settings.app_name,
    description="Объявления о жилье с картой, фотографиями и отзывами",
    version="1.0.0"
)

app.add_middleware(MethodOverrideMiddleware)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret,
    max_age=settings.session_max_age,
)

app.include_router(listings_router)
app.include_router(reviews_router)
app.include_router(users_router)


@app.exception_handler(ValidationFailed)
async def validation_failed_handler(request: Request, exc: ValidationFailed):
    return render(
        request, "error.html", status_code=exc.status_code,
        status=exc.status_code, message=exc.message, messages=exc.messages,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    messages = [
        f'"{".".join(str(part) for part in err["loc"][1:]) or err["loc"][0]}" {err["msg"]}'
        for err in exc.errors()
    ]
    return render(
        request, "error.html", status_code=400,
        status=400, message=", ".join(messages), messages=messages,
    )


@app.exception_handler(AuthenticationRequired)
async def authentication_required_handler(request: Request, exc: AuthenticationRequired):
    # Возвращаемся после логина только на GET-страницы
    if request.method == "GET":
        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"
        request.session[REDIRECT_KEY] = target
    flash(request, "error", exc.message)
    return RedirectResponse("/login", status_code=303)


@app.exception_handler(AuthorizationDenied)
async def authorization_denied_handler(request: Request, exc: AuthorizationDenied):
    flash(request, "error", exc.message)
    return RedirectResponse(exc.redirect_to, status_code=303)


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    flash(request, "error", exc.message)
    return RedirectResponse("/listings", status_code=303)


@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    logger.error(f"{type(exc).__name__}: {exc.message}")
    flash(request, "error", exc.message)
    return RedirectResponse("/listings", status_code=303)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = "Page Not Found" if exc.status_code == 404 else exc.detail
    return render(request, "error.html", status_code=exc.status_code, status=exc.status_code, message=message)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return render(request, "error.html", status_code=500, status=500, message="Internal Server Error")


@app.get("/")
async def index():
    return RedirectResponse("/listings")


@app.get("/health")
async def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "marketplace.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.debug,
    )
