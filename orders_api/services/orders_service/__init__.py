# orders_api/services/orders_service/__init__.py
"""
HTTP API заказов (FastAPI).
"""
