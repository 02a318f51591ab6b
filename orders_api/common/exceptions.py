# orders_api/common/exceptions.py
"""
Иерархия ошибок хранилища заказов.
Каждый вид отказа — отдельный класс, чтобы вызывающий код
ветвился по типу, а не по тексту сообщения.
"""

from __future__ import annotations


class OrderStoreError(Exception):
    """Базовая ошибка хранилища заказов."""
    pass


class OrderValidationError(OrderStoreError):
    """Некорректные входные данные (например, нулевой ID)."""
    pass


class InvalidStatusTransitionError(OrderValidationError):
    """Запрещённый переход статуса заказа."""

    def __init__(self, current: object, requested: object) -> None:
        self.current = current
        self.requested = requested
        super().__init__(
            f"Переход статуса {getattr(current, 'value', current)} -> "
            f"{getattr(requested, 'value', requested)} запрещён"
        )


class OrderNotFoundError(OrderStoreError):
    """Заказ с указанным ID отсутствует."""

    def __init__(self, order_id: int) -> None:
        self.order_id = order_id
        super().__init__(f"Заказ {order_id} не найден")


class DuplicateOrderError(OrderStoreError):
    """Заказ с таким ID уже существует."""

    def __init__(self, order_id: int) -> None:
        self.order_id = order_id
        super().__init__(f"Заказ {order_id} уже существует")


class SerializationError(OrderStoreError):
    """
    Ошибка кодирования/декодирования записи.
    Для прочитанных из Redis данных означает порчу записи.
    """

    def __init__(self, message: str, key: str | None = None) -> None:
        self.key = key
        super().__init__(message)


class BackendError(OrderStoreError):
    """Ошибка связи с хранилищем или выполнения транзакции."""
    pass


class BackendTimeoutError(BackendError):
    """Истёк дедлайн операции во время обращения к хранилищу."""
    pass


class OperationCancelledError(BackendError):
    """Операция отменена или дедлайн истёк до обращения к хранилищу."""
    pass
