# orders_api/core/orders/__init__.py
"""
Домен заказов.
Модели, формат хранения, репозиторий и сервис.
"""

from orders_api.core.orders.models import FindAllPage, FindAllResult, LineItem, Order, OrderCreateDTO
from orders_api.core.orders.repository import OrderStore
from orders_api.core.orders.service import OrderService

__all__ = [
    "FindAllPage",
    "FindAllResult",
    "LineItem",
    "Order",
    "OrderCreateDTO",
    "OrderStore",
    "OrderService",
]
