# orders_api/core/orders/models.py
"""
Модели данных заказов.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from orders_api.common.constants import MAX_ORDER_ID, OrderStatus


class LineItem(BaseModel):
    """Позиция заказа."""

    item_id: UUID = Field(..., description="ID товара")
    quantity: int = Field(..., ge=1, description="Количество")
    price: int = Field(..., ge=0, description="Цена за единицу в минимальных единицах валюты")


class Order(BaseModel):
    """Модель заказа. order_id назначается до вставки и дальше не меняется."""

    order_id: int = Field(..., ge=1, le=MAX_ORDER_ID, description="Беззнаковый 64-битный ID заказа")
    customer_id: Optional[UUID] = Field(None, description="ID покупателя")
    line_items: list[LineItem] = Field(default_factory=list, description="Позиции заказа")

    status: OrderStatus = Field(OrderStatus.NEW, description="Статус заказа")

    # Временные метки
    created_at: Optional[datetime] = Field(None, description="Время создания")
    shipped_at: Optional[datetime] = Field(None, description="Время отправки")
    completed_at: Optional[datetime] = Field(None, description="Время завершения")


class OrderCreateDTO(BaseModel):
    """DTO для создания заказа."""

    customer_id: UUID
    line_items: list[LineItem] = Field(..., min_length=1)


class OrderUpdateDTO(BaseModel):
    """DTO для смены статуса заказа."""

    status: OrderStatus


class FindAllPage(BaseModel):
    """Параметры страницы перечисления."""

    size: int = Field(..., ge=0, description="Максимум записей на странице")
    offset: int = Field(0, ge=0, description="Сколько записей индекса пропустить")


class FindAllResult(BaseModel):
    """
    Страница заказов.

    missing_keys и corrupted_keys — ключи из индекса, пропущенные из-за
    отсутствующего значения или нечитаемой записи.
    """

    orders: list[Order] = Field(default_factory=list)
    next_offset: Optional[int] = Field(None, description="Offset следующей страницы, None — страниц больше нет")
    missing_keys: list[str] = Field(default_factory=list)
    corrupted_keys: list[str] = Field(default_factory=list)

    @property
    def partial(self) -> bool:
        """Часть записей страницы пропущена."""
        return bool(self.missing_keys or self.corrupted_keys)
