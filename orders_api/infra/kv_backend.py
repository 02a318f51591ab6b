# orders_api/infra/kv_backend.py
"""
Абстракция key-value хранилища.
Набор примитивов, которого достаточно репозиторию заказов.
Реализации: RedisBackend (прод) и in-memory фейк в тестах.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, AsyncContextManager

from orders_api.common.context import OperationContext


class AtomicBatch(ABC):
    """
    Набор команд, выполняемых атомарно (MULTI/EXEC).

    Команды только ставятся в очередь; результаты появляются в results
    после выхода из блока atomic() в том же порядке, в каком команды добавлены.
    """

    def __init__(self) -> None:
        self.results: list[Any] = []

    @abstractmethod
    def set_if_absent(self, key: str, value: str) -> None:
        """SET NX. Результат: True, если ключ создан."""

    @abstractmethod
    def set_if_present(self, key: str, value: str) -> None:
        """SET XX. Результат: True, если ключ перезаписан."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """DEL. Результат: количество удалённых ключей."""

    @abstractmethod
    def set_add(self, name: str, member: str) -> None:
        """SADD. Результат: количество добавленных элементов."""

    @abstractmethod
    def set_remove(self, name: str, member: str) -> None:
        """SREM. Результат: количество удалённых элементов."""


class KeyValueBackend(ABC):
    """
    Клиент key-value хранилища.
    Каждый вызов принимает контекст операции: отменённый контекст
    приводит к ошибке до обращения к хранилищу.
    """

    @abstractmethod
    async def get(self, key: str, ctx: OperationContext) -> bytes | str | None:
        """Значение по ключу как есть (без декодирования) или None."""

    @abstractmethod
    async def get_many(self, keys: list[str], ctx: OperationContext) -> list[bytes | str | None]:
        """Значения нескольких ключей за один запрос (MGET), None для отсутствующих."""

    @abstractmethod
    async def set_if_absent(self, key: str, value: str, ctx: OperationContext) -> bool:
        """Записывает значение, только если ключа нет."""

    @abstractmethod
    async def set_if_present(self, key: str, value: str, ctx: OperationContext) -> bool:
        """Перезаписывает значение, только если ключ существует."""

    @abstractmethod
    async def delete(self, key: str, ctx: OperationContext) -> bool:
        """Удаляет ключ. True, если ключ существовал."""

    @abstractmethod
    async def set_add(self, name: str, member: str, ctx: OperationContext) -> int:
        """Добавляет элемент в множество."""

    @abstractmethod
    async def set_remove(self, name: str, member: str, ctx: OperationContext) -> int:
        """Удаляет элемент из множества."""

    @abstractmethod
    async def set_members(self, name: str, ctx: OperationContext) -> set[str]:
        """Все элементы множества."""

    @abstractmethod
    def atomic(self, ctx: OperationContext) -> AsyncContextManager[AtomicBatch]:
        """
        Атомарный батч.

        При нормальном выходе из блока батч обязательно выполняется,
        при исключении внутри блока ни одна команда не отправляется.

        Example:
            async with backend.atomic(ctx) as batch:
                batch.set_if_absent(key, value)
                batch.set_add("orders", key)
            created, _ = batch.results
        """

    @abstractmethod
    async def ping(self, ctx: OperationContext) -> bool:
        """Проверка доступности хранилища."""
