from fastapi import Depends, Request

from orders_api.common.context import OperationContext
from orders_api.config import settings
from orders_api.core.orders.repository import OrderStore
from orders_api.core.orders.service import OrderService
from orders_api.infra.kv_backend import KeyValueBackend


def get_backend(request: Request) -> KeyValueBackend:
    return request.app.state.kv_backend


def get_operation_context() -> OperationContext:
    return OperationContext.with_timeout(settings.store.OPERATION_TIMEOUT)


def get_order_store(backend: KeyValueBackend = Depends(get_backend)) -> OrderStore:
    return OrderStore(backend)


def get_order_service(store: OrderStore = Depends(get_order_store)) -> OrderService:
    return OrderService(store, id_attempts=settings.store.ORDER_ID_ATTEMPTS)
