# orders_api/services/orders_service/app.py
"""
FastAPI приложение сервиса заказов.
Маршрутизация, жизненный цикл подключения к Redis и отображение
ошибок хранилища в HTTP статусы.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from orders_api.common.context import OperationContext
from orders_api.common.exceptions import (
    BackendError,
    BackendTimeoutError,
    DuplicateOrderError,
    OrderNotFoundError,
    OrderValidationError,
    SerializationError,
)
from orders_api.common.logger import log_error, log_warning, setup_logging
from orders_api.config import settings
from orders_api.infra.kv_backend import KeyValueBackend
from orders_api.infra.redis_client import create_redis_backend
from orders_api.services.orders_service.routes import router
from orders_api.services.orders_service.schemas import ErrorResponse, HealthStatus

SERVICE_NAME = "orders_api"


def _error(status_code: int, error_code: str, message: str, details: Optional[list] = None) -> JSONResponse:
    body = ErrorResponse(error_code=error_code, message=message, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


# =============================================================================
# ОБРАБОТЧИКИ ОШИБОК
# Текст ошибок Redis наружу не отдаётся, только в лог.
# =============================================================================

async def handle_not_found(request: Request, exc: OrderNotFoundError) -> JSONResponse:
    return _error(status.HTTP_404_NOT_FOUND, "order_not_found", "Order not found")


async def handle_duplicate(request: Request, exc: DuplicateOrderError) -> JSONResponse:
    return _error(status.HTTP_409_CONFLICT, "order_exists", "Order already exists")


async def handle_order_validation(request: Request, exc: OrderValidationError) -> JSONResponse:
    return _error(status.HTTP_400_BAD_REQUEST, "validation_error", str(exc))


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [{"loc": list(err.get("loc", ())), "msg": err.get("msg", "")} for err in exc.errors()]
    return _error(status.HTTP_400_BAD_REQUEST, "validation_error", "Invalid request", details)


async def handle_serialization(request: Request, exc: SerializationError) -> JSONResponse:
    await log_error(f"{request.method} {request.url.path}: повреждённые данные: {exc}")
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_error", "Internal server error")


async def handle_backend(request: Request, exc: BackendError) -> JSONResponse:
    if isinstance(exc, BackendTimeoutError):
        await log_warning(f"{request.method} {request.url.path}: таймаут хранилища: {exc}")
        return _error(status.HTTP_504_GATEWAY_TIMEOUT, "storage_timeout", "Storage timeout")
    await log_error(f"{request.method} {request.url.path}: ошибка хранилища: {exc}")
    return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "storage_unavailable", "Storage unavailable")


# =============================================================================
# ПРИЛОЖЕНИЕ
# =============================================================================

def create_app(backend: Optional[KeyValueBackend] = None) -> FastAPI:
    """
    Создаёт приложение.

    Args:
        backend: Готовый клиент хранилища (тесты). Если None, RedisBackend
            создаётся при старте и закрывается при остановке.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging()
        if backend is not None:
            yield
            return

        redis_backend = await create_redis_backend()
        app.state.kv_backend = redis_backend
        try:
            yield
        finally:
            await redis_backend.disconnect()

    app = FastAPI(
        title="Orders API",
        version=settings.system.VERSION,
        lifespan=lifespan,
    )

    if backend is not None:
        app.state.kv_backend = backend

    app.add_exception_handler(OrderNotFoundError, handle_not_found)
    app.add_exception_handler(DuplicateOrderError, handle_duplicate)
    app.add_exception_handler(OrderValidationError, handle_order_validation)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(SerializationError, handle_serialization)
    app.add_exception_handler(BackendError, handle_backend)

    app.include_router(router)

    @app.get("/health", response_model=HealthStatus)
    async def health_check(request: Request):
        kv_backend: KeyValueBackend = request.app.state.kv_backend
        try:
            redis_ok = await kv_backend.ping(OperationContext.with_timeout(2.0))
        except BackendError as e:
            await log_warning(f"Health check: хранилище недоступно: {e}")
            redis_ok = False

        health = HealthStatus(
            service=SERVICE_NAME,
            status="healthy" if redis_ok else "unhealthy",
            version=settings.system.VERSION,
            dependencies={"redis": "healthy" if redis_ok else "unhealthy"},
        )
        code = status.HTTP_200_OK if redis_ok else status.HTTP_503_SERVICE_UNAVAILABLE
        return JSONResponse(status_code=code, content=health.model_dump())

    return app


app = create_app()
