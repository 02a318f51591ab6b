# orders_api/infra/__init__.py
"""
Инфраструктурный слой.
Работа с внешними сервисами: Redis.
"""

from orders_api.infra.kv_backend import AtomicBatch, KeyValueBackend
from orders_api.infra.redis_client import RedisBackend, create_redis_backend

__all__ = [
    "AtomicBatch",
    "KeyValueBackend",
    "RedisBackend",
    "create_redis_backend",
]
