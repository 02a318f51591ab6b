# tests/conftest.py
"""
Общие фикстуры и настройки для тестов.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, AsyncIterator
from uuid import UUID

import pytest

# Устанавливаем переменные окружения перед импортом модулей
os.environ.setdefault("REDIS_PASSWORD", "")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from orders_api.common.constants import OrderStatus
from orders_api.common.context import OperationContext
from orders_api.core.orders.models import LineItem, Order
from orders_api.core.orders.repository import OrderStore
from orders_api.infra.kv_backend import AtomicBatch, KeyValueBackend


# =============================================================================
# IN-MEMORY ХРАНИЛИЩЕ
# =============================================================================

class InMemoryAtomicBatch(AtomicBatch):
    """Батч фейкового хранилища: команды копятся и применяются разом."""

    def __init__(self) -> None:
        super().__init__()
        self.ops: list[tuple[str, tuple[Any, ...]]] = []

    def set_if_absent(self, key: str, value: str) -> None:
        self.ops.append(("set_if_absent", (key, value)))

    def set_if_present(self, key: str, value: str) -> None:
        self.ops.append(("set_if_present", (key, value)))

    def delete(self, key: str) -> None:
        self.ops.append(("delete", (key,)))

    def set_add(self, name: str, member: str) -> None:
        self.ops.append(("set_add", (name, member)))

    def set_remove(self, name: str, member: str) -> None:
        self.ops.append(("set_remove", (name, member)))


class InMemoryBackend(KeyValueBackend):
    """
    Фейк KeyValueBackend на словарях.

    calls — журнал команд, дошедших до «хранилища».
    fail_with — исключение, которое бросает любая команда.
    """

    def __init__(self) -> None:
        self.values: dict[str, str | bytes] = {}
        self.sets: dict[str, set[str]] = {}
        self.calls: list[str] = []
        self.fail_with: Exception | None = None

    def _enter(self, ctx: OperationContext, command: str) -> None:
        ctx.check()
        self.calls.append(command)
        if self.fail_with is not None:
            raise self.fail_with

    # Синхронные примитивы, общие для прямых вызовов и батчей

    def _set_if_absent(self, key: str, value: str) -> bool:
        if key in self.values:
            return False
        self.values[key] = value
        return True

    def _set_if_present(self, key: str, value: str) -> bool:
        if key not in self.values:
            return False
        self.values[key] = value
        return True

    def _delete(self, key: str) -> int:
        return 1 if self.values.pop(key, None) is not None else 0

    def _set_add(self, name: str, member: str) -> int:
        members = self.sets.setdefault(name, set())
        if member in members:
            return 0
        members.add(member)
        return 1

    def _set_remove(self, name: str, member: str) -> int:
        members = self.sets.get(name, set())
        if member not in members:
            return 0
        members.discard(member)
        return 1

    async def get(self, key: str, ctx: OperationContext) -> str | bytes | None:
        self._enter(ctx, "GET")
        return self.values.get(key)

    async def get_many(self, keys: list[str], ctx: OperationContext) -> list[str | bytes | None]:
        if not keys:
            return []
        self._enter(ctx, "MGET")
        return [self.values.get(key) for key in keys]

    async def set_if_absent(self, key: str, value: str, ctx: OperationContext) -> bool:
        self._enter(ctx, "SET NX")
        return self._set_if_absent(key, value)

    async def set_if_present(self, key: str, value: str, ctx: OperationContext) -> bool:
        self._enter(ctx, "SET XX")
        return self._set_if_present(key, value)

    async def delete(self, key: str, ctx: OperationContext) -> bool:
        self._enter(ctx, "DEL")
        return self._delete(key) > 0

    async def set_add(self, name: str, member: str, ctx: OperationContext) -> int:
        self._enter(ctx, "SADD")
        return self._set_add(name, member)

    async def set_remove(self, name: str, member: str, ctx: OperationContext) -> int:
        self._enter(ctx, "SREM")
        return self._set_remove(name, member)

    async def set_members(self, name: str, ctx: OperationContext) -> set[str]:
        self._enter(ctx, "SMEMBERS")
        return set(self.sets.get(name, set()))

    @asynccontextmanager
    async def atomic(self, ctx: OperationContext) -> AsyncIterator[AtomicBatch]:
        ctx.check()
        batch = InMemoryAtomicBatch()
        yield batch
        self._enter(ctx, "EXEC")
        batch.results = [getattr(self, f"_{name}")(*args) for name, args in batch.ops]

    async def ping(self, ctx: OperationContext) -> bool:
        self._enter(ctx, "PING")
        return True


# =============================================================================
# ФИКСТУРЫ
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Корневая директория проекта."""
    return Path(__file__).parent.parent


@pytest.fixture
def backend() -> InMemoryBackend:
    """Пустое in-memory хранилище."""
    return InMemoryBackend()


@pytest.fixture
def order_store(backend: InMemoryBackend) -> OrderStore:
    """OrderStore поверх in-memory хранилища."""
    return OrderStore(backend)


@pytest.fixture
def ctx() -> OperationContext:
    """Контекст операции с запасом по времени."""
    return OperationContext.with_timeout(30.0)


@pytest.fixture
def make_order():
    """Фабрика заказов."""

    def _make(order_id: int, status: OrderStatus = OrderStatus.NEW, **kwargs: Any) -> Order:
        return Order(order_id=order_id, status=status, **kwargs)

    return _make


@pytest.fixture
def full_order() -> Order:
    """Заказ со всеми заполненными полями."""
    return Order(
        order_id=2**64 - 1,
        customer_id=UUID("6f1c2a4e-8d3b-4c5a-9e7f-0a1b2c3d4e5f"),
        line_items=[
            LineItem(item_id=UUID("11111111-2222-3333-4444-555555555555"), quantity=2, price=1999),
            LineItem(item_id=UUID("aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee"), quantity=1, price=0),
        ],
        status=OrderStatus.SHIPPED,
        created_at=datetime(2026, 1, 15, 10, 30, tzinfo=timezone.utc),
        shipped_at=datetime(2026, 1, 16, 8, 0, 5, 123456, tzinfo=timezone.utc),
    )
