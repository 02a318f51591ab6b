# orders_api/services/__init__.py
"""
HTTP сервисы приложения.

Сервисы:
- orders_service: CRUD заказов поверх OrderStore
"""

__all__: list[str] = []
