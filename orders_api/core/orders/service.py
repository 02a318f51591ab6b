# orders_api/core/orders/service.py
"""
Сервис для работы с заказами.
Назначает ID, ведёт жизненный цикл статусов и делегирует хранение OrderStore.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timezone
from typing import Optional

from orders_api.common.constants import MAX_ORDER_ID, ORDER_STATUS_TRANSITIONS, OrderStatus, TypeMsg
from orders_api.common.context import OperationContext
from orders_api.common.exceptions import DuplicateOrderError, InvalidStatusTransitionError
from orders_api.common.logger import log_info, log_warning
from orders_api.core.orders.models import FindAllPage, FindAllResult, Order, OrderCreateDTO
from orders_api.core.orders.repository import OrderStore


def generate_order_id() -> int:
    """Случайный ненулевой 64-битный ID."""
    while True:
        order_id = secrets.randbits(64)
        if 1 <= order_id <= MAX_ORDER_ID:
            return order_id


class OrderService:
    """
    Сервис заказов.
    Управляет жизненным циклом заказов.
    """

    def __init__(self, store: OrderStore, id_attempts: int = 3) -> None:
        """
        Args:
            store: Репозиторий заказов
            id_attempts: Сколько раз генерировать новый ID при коллизии
        """
        self._store = store
        self._id_attempts = id_attempts

    async def create_order(self, dto: OrderCreateDTO, ctx: Optional[OperationContext] = None) -> Order:
        """
        Создаёт заказ со случайным ID.

        Raises:
            DuplicateOrderError: Все попытки попали в занятый ID
        """
        last_error: DuplicateOrderError | None = None

        for attempt in range(1, self._id_attempts + 1):
            order = Order(
                order_id=generate_order_id(),
                customer_id=dto.customer_id,
                line_items=dto.line_items,
                status=OrderStatus.NEW,
                created_at=datetime.now(timezone.utc),
            )
            try:
                await self._store.insert(order, ctx)
            except DuplicateOrderError as e:
                last_error = e
                await log_warning(f"Коллизия ID заказа {order.order_id} (попытка {attempt}/{self._id_attempts})")
                continue

            await log_info(f"Заказ {order.order_id} создан", type_msg=TypeMsg.INFO)
            return order

        raise last_error  # type: ignore[misc]

    async def get_order(self, order_id: int, ctx: Optional[OperationContext] = None) -> Order:
        return await self._store.find_by_id(order_id, ctx)

    async def list_orders(self, page: FindAllPage, ctx: Optional[OperationContext] = None) -> FindAllResult:
        return await self._store.find_all(page, ctx)

    async def update_status(
        self,
        order_id: int,
        status: OrderStatus,
        ctx: Optional[OperationContext] = None,
    ) -> Order:
        """
        Меняет статус заказа и проставляет соответствующую метку времени.

        Args:
            order_id: ID заказа
            status: Новый статус

        Returns:
            Обновлённый заказ

        Raises:
            OrderNotFoundError: Заказа нет
            InvalidStatusTransitionError: Переход из текущего статуса запрещён
        """
        order = await self._store.find_by_id(order_id, ctx)

        if status not in ORDER_STATUS_TRANSITIONS[order.status]:
            raise InvalidStatusTransitionError(order.status, status)

        now = datetime.now(timezone.utc)
        changes: dict[str, object] = {"status": status}
        if status == OrderStatus.SHIPPED:
            changes["shipped_at"] = now
        elif status == OrderStatus.COMPLETED:
            changes["completed_at"] = now

        updated = order.model_copy(update=changes)
        await self._store.update(updated, ctx)

        await log_info(f"Статус заказа {order_id}: {order.status.value} -> {status.value}", type_msg=TypeMsg.INFO)
        return updated

    async def delete_order(self, order_id: int, ctx: Optional[OperationContext] = None) -> None:
        await self._store.delete_by_id(order_id, ctx)
        await log_info(f"Заказ {order_id} удалён", type_msg=TypeMsg.INFO)
