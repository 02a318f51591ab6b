# orders_api/services/orders_service/schemas.py
"""
Схемы HTTP ответов сервиса заказов.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from orders_api.core.orders.models import Order


class OrderPageResponse(BaseModel):
    """Страница заказов."""

    items: list[Order]
    next_offset: Optional[int] = None
    partial: bool = False


class ErrorResponse(BaseModel):
    """Стандартный ответ с ошибкой."""

    error_code: str
    message: str
    details: Optional[list[dict[str, Any]]] = None


class HealthStatus(BaseModel):
    """Статус здоровья сервиса."""

    service: str
    status: str = "healthy"  # healthy, unhealthy
    version: Optional[str] = None
    dependencies: dict[str, str] = Field(default_factory=dict)
