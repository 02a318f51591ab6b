# orders_api/__init__.py
"""
Сервис заказов поверх Redis.
"""
