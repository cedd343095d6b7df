"""
FastAPI приложение недельной рассылки расчётов
"""
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import time
import uuid

from core.config.settings import Settings, settings as default_settings, validate_settings
from core.exceptions import (
    AuthorizationError,
    ConfigurationError,
    DispatchError,
    PayrollJobError,
    RecipientUnreachableError,
    StaffNotFoundError,
    UpstreamFetchError,
)
from core.logging.logger import logger, setup_logging
from .main import api_router

ERROR_STATUS_CODES = {
    AuthorizationError: 401,
    StaffNotFoundError: 404,
    RecipientUnreachableError: 400,
    UpstreamFetchError: 502,
    DispatchError: 502,
    ConfigurationError: 500,
}


def _status_for(exc: PayrollJobError) -> int:
    for exc_type, status_code in ERROR_STATUS_CODES.items():
        if isinstance(exc, exc_type):
            return status_code
    return 500


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Создание FastAPI приложения.

    Raises:
        ConfigurationError: не заданы обязательные настройки (приложение не стартует)
    """
    app_settings = validate_settings(app_settings or default_settings)
    setup_logging(app_settings.log_level, app_settings.log_format)

    app = FastAPI(
        title=app_settings.app_name,
        description="Недельная рассылка расчётов зарплаты сотрудникам",
        version=app_settings.version,
        debug=app_settings.debug,
        docs_url="/docs" if app_settings.debug else None,
        redoc_url="/redoc" if app_settings.debug else None,
    )
    app.state.settings = app_settings

    # Middleware для логирования запросов
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Логирование всех HTTP запросов."""
        request_id = str(uuid.uuid4())
        start_time = time.time()

        # query string не логируем целиком, только путь
        logger.info(
            "HTTP Request started",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                "HTTP Request failed",
                request_id=request_id,
                error=str(e),
                process_time=process_time
            )
            raise

        process_time = time.time() - start_time
        logger.info(
            "HTTP Request completed",
            request_id=request_id,
            status_code=response.status_code,
            process_time=process_time
        )
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(process_time)
        return response

    # Обработчики ошибок
    @app.exception_handler(PayrollJobError)
    async def payroll_error_handler(request: Request, exc: PayrollJobError):
        """Отказ в запросе без тела отчёта."""
        status_code = _status_for(exc)
        logger.error(
            "Request rejected",
            code=exc.code,
            status_code=status_code,
            error=exc.message,
            path=request.url.path
        )
        return JSONResponse(
            status_code=status_code,
            content={"ok": False, "error": exc.message, "code": exc.code}
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Обработчик HTTP исключений."""
        logger.error(
            "HTTP Exception",
            status_code=exc.status_code,
            detail=exc.detail,
            path=request.url.path
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"ok": False, "error": str(exc.detail), "code": "HTTP_ERROR"}
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Обработчик ошибок валидации."""
        logger.error(
            "Validation Error",
            errors=exc.errors(),
            path=request.url.path
        )
        return JSONResponse(
            status_code=422,
            content={
                "ok": False,
                "error": "Ошибка валидации данных",
                "code": "VALIDATION_ERROR",
                "details": jsonable_errors(exc),
            }
        )

    app.include_router(api_router)

    @app.get("/health")
    async def health_check():
        """Проверка состояния приложения."""
        return {
            "status": "healthy",
            "timestamp": time.time(),
            "version": app_settings.version
        }

    logger.info("Application configured", app=app_settings.app_name, environment=app_settings.environment)
    return app


def jsonable_errors(exc: RequestValidationError):
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
