# orders_api/infra/redis_client.py
"""
Клиент Redis для хранилища заказов.
Реализует KeyValueBackend поверх redis.asyncio: условные записи,
множества, MGET и атомарные батчи MULTI/EXEC.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from functools import wraps
from typing import Any, AsyncIterator, Awaitable, Callable, TypeVar

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from orders_api.common.constants import TypeMsg
from orders_api.common.context import OperationContext
from orders_api.common.exceptions import BackendError, BackendTimeoutError
from orders_api.common.logger import log_error, log_info
from orders_api.infra.kv_backend import AtomicBatch, KeyValueBackend

T = TypeVar("T")


def _to_str(value: bytes | str) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def retry_on_connection_error(
    max_attempts: int = 3,
    delay: float = 1.0,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Декоратор для ретрая при ошибках подключения к Redis.

    Args:
        max_attempts: Максимальное количество попыток
        delay: Базовая задержка между попытками (секунды), растёт линейно
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            last_error: Exception | None = None

            for attempt in range(1, max_attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except (RedisConnectionError, RedisTimeoutError, OSError) as e:
                    last_error = e
                    if attempt < max_attempts:
                        await log_info(
                            f"Ошибка подключения к Redis (попытка {attempt}/{max_attempts}): {e}",
                            type_msg=TypeMsg.WARNING,
                        )
                        await asyncio.sleep(delay * attempt)
                    else:
                        await log_error(f"Не удалось подключиться к Redis после {max_attempts} попыток: {e}")

            raise BackendError("Redis недоступен") from last_error

        return wrapper

    return decorator


class RedisAtomicBatch(AtomicBatch):
    """Батч поверх транзакционного пайплайна redis-py."""

    def __init__(self, pipe: Any, make_key: Callable[[str], str]) -> None:
        super().__init__()
        self._pipe = pipe
        self._make_key = make_key
        self.size = 0

    def set_if_absent(self, key: str, value: str) -> None:
        self._pipe.set(self._make_key(key), value, nx=True)
        self.size += 1

    def set_if_present(self, key: str, value: str) -> None:
        self._pipe.set(self._make_key(key), value, xx=True)
        self.size += 1

    def delete(self, key: str) -> None:
        self._pipe.delete(self._make_key(key))
        self.size += 1

    def set_add(self, name: str, member: str) -> None:
        self._pipe.sadd(self._make_key(name), member)
        self.size += 1

    def set_remove(self, name: str, member: str) -> None:
        self._pipe.srem(self._make_key(name), member)
        self.size += 1


class RedisBackend(KeyValueBackend):
    """
    Асинхронный клиент Redis.

    Создаётся явно и передаётся в репозиторий через конструктор.
    Пул соединений redis.asyncio безопасен для конкурентных запросов,
    поэтому один экземпляр обслуживает весь процесс.

    Значения читаются байтами и декодируются только в кодеке заказов:
    запись с битым UTF-8 должна стать SerializationError, а не ошибкой
    разбора ответа Redis.
    """

    def __init__(
        self,
        client: redis.Redis | None = None,
        namespace: str = "",
    ) -> None:
        """
        Args:
            client: Готовый клиент redis.asyncio (если None — нужен connect())
            namespace: Префикс ключей (пустой — ключи без префикса)
        """
        self._client = client
        self._namespace = namespace

    @property
    def client(self) -> redis.Redis:
        """Возвращает клиент Redis."""
        if self._client is None:
            raise RuntimeError("Redis клиент не инициализирован. Вызовите connect() сначала.")
        return self._client

    def _make_key(self, key: str) -> str:
        """Добавляет namespace к ключу."""
        if not self._namespace:
            return key
        return f"{self._namespace}:{key}"

    @retry_on_connection_error(max_attempts=3, delay=1.0)
    async def connect(
        self,
        url: str | None = None,
        max_connections: int = 50,
    ) -> None:
        """
        Подключается к Redis.

        Args:
            url: URL Redis (если None, берётся из конфига)
            max_connections: Максимальное количество соединений
        """
        if self._client is not None:
            return

        if url is None:
            from orders_api.config import settings
            url = settings.redis.url
            max_connections = settings.redis.REDIS_MAX_CONNECTIONS
            self._namespace = settings.redis.REDIS_NAMESPACE

        await log_info("Подключение к Redis...", type_msg=TypeMsg.INFO)

        client = redis.from_url(
            url,
            max_connections=max_connections,
            decode_responses=False,
        )
        try:
            await client.ping()
        except Exception:
            await client.aclose()
            raise

        self._client = client
        await log_info("Подключение к Redis установлено", type_msg=TypeMsg.INFO)

    async def disconnect(self) -> None:
        """Закрывает соединение с Redis."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            await log_info("Соединение с Redis закрыто", type_msg=TypeMsg.INFO)

    async def _call(
        self,
        ctx: OperationContext,
        command: str,
        func: Callable[..., Awaitable[T]],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """
        Выполняет команду с учётом контекста.
        Корутина создаётся только после проверки отмены.
        """
        ctx.check()
        try:
            return await asyncio.wait_for(func(*args, **kwargs), timeout=ctx.remaining())
        except (asyncio.TimeoutError, RedisTimeoutError) as e:
            raise BackendTimeoutError(f"Redis {command}: истёк таймаут") from e
        except (RedisError, OSError) as e:
            raise BackendError(f"Redis {command}: {e}") from e

    # =========================================================================
    # БАЗОВЫЕ ОПЕРАЦИИ
    # =========================================================================

    async def get(self, key: str, ctx: OperationContext) -> bytes | None:
        return await self._call(ctx, "GET", self.client.get, self._make_key(key))

    async def get_many(self, keys: list[str], ctx: OperationContext) -> list[bytes | None]:
        if not keys:
            return []
        return await self._call(ctx, "MGET", self.client.mget, [self._make_key(k) for k in keys])

    async def set_if_absent(self, key: str, value: str, ctx: OperationContext) -> bool:
        result = await self._call(ctx, "SET NX", self.client.set, self._make_key(key), value, nx=True)
        return bool(result)

    async def set_if_present(self, key: str, value: str, ctx: OperationContext) -> bool:
        result = await self._call(ctx, "SET XX", self.client.set, self._make_key(key), value, xx=True)
        return bool(result)

    async def delete(self, key: str, ctx: OperationContext) -> bool:
        return await self._call(ctx, "DEL", self.client.delete, self._make_key(key)) > 0

    # =========================================================================
    # SET ОПЕРАЦИИ
    # =========================================================================

    async def set_add(self, name: str, member: str, ctx: OperationContext) -> int:
        return await self._call(ctx, "SADD", self.client.sadd, self._make_key(name), member)

    async def set_remove(self, name: str, member: str, ctx: OperationContext) -> int:
        return await self._call(ctx, "SREM", self.client.srem, self._make_key(name), member)

    async def set_members(self, name: str, ctx: OperationContext) -> set[str]:
        """
        Элементы множества строками.
        Клиент работает без decode_responses, поэтому ключи декодируются здесь;
        не-UTF-8 элемент не совпадёт ни с одним ключом заказа.
        """
        members = await self._call(ctx, "SMEMBERS", self.client.smembers, self._make_key(name))
        return {_to_str(member) for member in members}

    # =========================================================================
    # ТРАНЗАКЦИИ
    # =========================================================================

    @asynccontextmanager
    async def atomic(self, ctx: OperationContext) -> AsyncIterator[AtomicBatch]:
        """
        Контекстный менеджер для MULTI/EXEC.
        EXEC выполняется при выходе из блока, при ошибке пайплайн сбрасывается
        без отправки команд.

        Yields:
            Батч для постановки команд в очередь
        """
        ctx.check()
        async with self.client.pipeline(transaction=True) as pipe:
            batch = RedisAtomicBatch(pipe, self._make_key)
            yield batch
            if batch.size:
                batch.results = await self._call(ctx, "EXEC", pipe.execute)

    async def ping(self, ctx: OperationContext) -> bool:
        return bool(await self._call(ctx, "PING", self.client.ping))


async def create_redis_backend() -> RedisBackend:
    """
    Создаёт и подключает RedisBackend по настройкам из конфигурации.
    """
    from orders_api.config import settings

    backend = RedisBackend(namespace=settings.redis.REDIS_NAMESPACE)
    await backend.connect(
        url=settings.redis.url,
        max_connections=settings.redis.REDIS_MAX_CONNECTIONS,
    )
    await log_info(
        f"Redis подключён: {settings.redis.REDIS_HOST}:{settings.redis.REDIS_PORT}/{settings.redis.REDIS_DB}",
        type_msg=TypeMsg.INFO,
    )
    return backend
