# orders_api/core/__init__.py
"""
Доменный слой (Core Domain).
Бизнес-логика заказов, независимая от конкретного хранилища.
"""

from orders_api.core.orders import Order, OrderService, OrderStore

__all__ = [
    "Order",
    "OrderService",
    "OrderStore",
]
