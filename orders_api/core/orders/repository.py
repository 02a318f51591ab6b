# orders_api/core/orders/repository.py
"""
Репозиторий заказов поверх key-value хранилища.

Каждый заказ — одна пара ключ/значение плюс членство ключа в множестве
"orders", которое служит индексом для перечисления. Вставка и удаление
меняют ключ и индекс одним атомарным батчем.

Изоляция между вызовами — read committed: find_all, идущий параллельно
со вставкой, может как увидеть новый заказ, так и не увидеть.
"""

from __future__ import annotations

from typing import Optional

from orders_api.common.constants import ORDERS_INDEX_KEY
from orders_api.common.context import OperationContext
from orders_api.common.exceptions import (
    DuplicateOrderError,
    OrderNotFoundError,
    SerializationError,
)
from orders_api.common.logger import log_debug, log_error, log_warning
from orders_api.core.orders.codec import (
    decode_order,
    encode_order,
    order_id_key,
    parse_order_key,
    validate_order_id,
)
from orders_api.core.orders.models import FindAllPage, FindAllResult, Order
from orders_api.infra.kv_backend import KeyValueBackend


class OrderStore:
    """Репозиторий заказов."""

    def __init__(self, backend: KeyValueBackend) -> None:
        """
        Инициализация репозитория.

        Args:
            backend: Клиент key-value хранилища (Dependency Injection)
        """
        self._backend = backend

    async def insert(self, order: Order, ctx: Optional[OperationContext] = None) -> None:
        """
        Сохраняет новый заказ и добавляет его ключ в индекс.

        Args:
            order: Заказ с уже назначенным order_id
            ctx: Контекст операции

        Raises:
            OrderValidationError: Некорректный ID
            SerializationError: Заказ не сериализуется
            DuplicateOrderError: Заказ с таким ID уже есть (значение не тронуто)
            BackendError: Ошибка Redis
        """
        ctx = ctx or OperationContext.background()
        ctx.check()
        validate_order_id(order.order_id)

        key = order_id_key(order.order_id)
        payload = encode_order(order)

        async with self._backend.atomic(ctx) as batch:
            batch.set_if_absent(key, payload)
            batch.set_add(ORDERS_INDEX_KEY, key)

        created = batch.results[0]
        if not created:
            raise DuplicateOrderError(order.order_id)

        await log_debug(f"Заказ {order.order_id} создан")

    async def find_by_id(self, order_id: int, ctx: Optional[OperationContext] = None) -> Order:
        """
        Получает заказ по ID.

        Args:
            order_id: ID заказа
            ctx: Контекст операции

        Returns:
            Заказ

        Raises:
            OrderNotFoundError: Заказа нет
            SerializationError: Запись повреждена или принадлежит другому заказу
        """
        ctx = ctx or OperationContext.background()
        ctx.check()
        validate_order_id(order_id)

        key = order_id_key(order_id)
        value = await self._backend.get(key, ctx)
        if value is None:
            raise OrderNotFoundError(order_id)

        try:
            return decode_order(value, key=key, expected_id=order_id)
        except SerializationError as e:
            await log_error(f"Повреждённая запись {key}: {e}", extra={"key": key})
            raise

    async def update(self, order: Order, ctx: Optional[OperationContext] = None) -> None:
        """
        Перезаписывает существующий заказ. Ключ и индекс не меняются.

        Raises:
            OrderNotFoundError: Заказа нет (ничего не создаётся)
            SerializationError: Заказ не сериализуется
        """
        ctx = ctx or OperationContext.background()
        ctx.check()
        validate_order_id(order.order_id)

        key = order_id_key(order.order_id)
        payload = encode_order(order)

        if not await self._backend.set_if_present(key, payload, ctx):
            raise OrderNotFoundError(order.order_id)

        await log_debug(f"Заказ {order.order_id} обновлён")

    async def delete_by_id(self, order_id: int, ctx: Optional[OperationContext] = None) -> None:
        """
        Удаляет заказ и его ключ из индекса одним батчем.

        Raises:
            OrderNotFoundError: Заказа не было
        """
        ctx = ctx or OperationContext.background()
        ctx.check()
        validate_order_id(order_id)

        key = order_id_key(order_id)

        async with self._backend.atomic(ctx) as batch:
            batch.delete(key)
            batch.set_remove(ORDERS_INDEX_KEY, key)

        deleted = batch.results[0]
        if not deleted:
            raise OrderNotFoundError(order_id)

        await log_debug(f"Заказ {order_id} удалён")

    async def find_all(self, page: FindAllPage, ctx: Optional[OperationContext] = None) -> FindAllResult:
        """
        Возвращает страницу заказов.

        Порядок перечисления — по возрастанию order_id, поэтому страницы
        с offset = k * size не пересекаются и не оставляют пропусков,
        пока индекс не меняется.

        Записи без значения и нечитаемые записи пропускаются
        и перечисляются в результате, а не роняют всю страницу.

        Args:
            page: Размер страницы и смещение
            ctx: Контекст операции

        Returns:
            Страница заказов
        """
        ctx = ctx or OperationContext.background()
        ctx.check()

        if page.size == 0:
            return FindAllResult()

        members = await self._backend.set_members(ORDERS_INDEX_KEY, ctx)

        order_ids: list[int] = []
        for member in members:
            try:
                order_ids.append(parse_order_key(member))
            except ValueError:
                await log_warning(f"В индексе {ORDERS_INDEX_KEY} посторонний элемент: {member!r}")
        order_ids.sort()

        end = page.offset + page.size
        page_ids = order_ids[page.offset:end]
        keys = [order_id_key(order_id) for order_id in page_ids]
        next_offset = end if end < len(order_ids) else None

        if not keys:
            return FindAllResult(next_offset=next_offset)

        values = await self._backend.get_many(keys, ctx)

        result = FindAllResult(next_offset=next_offset)
        for order_id, key, value in zip(page_ids, keys, values):
            if value is None:
                result.missing_keys.append(key)
                continue
            try:
                result.orders.append(decode_order(value, key=key, expected_id=order_id))
            except SerializationError as e:
                await log_error(f"Повреждённая запись {key}: {e}", extra={"key": key})
                result.corrupted_keys.append(key)

        if result.partial:
            await log_warning(
                f"Страница заказов неполная: нет значения у {len(result.missing_keys)}, "
                f"повреждено {len(result.corrupted_keys)}",
                extra={"missing": result.missing_keys, "corrupted": result.corrupted_keys},
            )

        return result
