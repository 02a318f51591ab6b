# orders_api/core/orders/codec.py
"""
Формат хранения заказов в Redis.

Ключ: "order:<decimal id>", значение: JSON модели Order.
Оба формата уже лежат в хранилище, любое изменение требует миграции.
"""

from __future__ import annotations

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from orders_api.common.constants import MAX_ORDER_ID, ORDER_KEY_PREFIX
from orders_api.common.exceptions import OrderValidationError, SerializationError
from orders_api.core.orders.models import Order


def validate_order_id(order_id: int) -> int:
    """
    Проверяет, что ID — беззнаковое 64-битное число больше нуля.

    Raises:
        OrderValidationError: ID отсутствует, нулевой или вне диапазона
    """
    if isinstance(order_id, bool) or not isinstance(order_id, int):
        raise OrderValidationError(f"ID заказа должен быть целым числом, получено: {order_id!r}")
    if not 1 <= order_id <= MAX_ORDER_ID:
        raise OrderValidationError(f"ID заказа вне диапазона 1..2^64-1: {order_id}")
    return order_id


def order_id_key(order_id: int) -> str:
    """Ключ записи заказа."""
    return f"{ORDER_KEY_PREFIX}:{order_id}"


def parse_order_key(key: str) -> int:
    """
    Обратное преобразование к order_id_key.
    Принимает только каноничную десятичную запись без ведущих нулей и знака.

    Raises:
        ValueError: Ключ не является ключом заказа
    """
    prefix, sep, digits = key.partition(":")
    if prefix != ORDER_KEY_PREFIX or not sep or not digits.isdigit() or not digits.isascii():
        raise ValueError(f"Не ключ заказа: {key!r}")
    if digits != str(int(digits)):
        raise ValueError(f"Неканоничный ключ заказа: {key!r}")
    order_id = int(digits)
    if not 1 <= order_id <= MAX_ORDER_ID:
        raise ValueError(f"ID вне диапазона в ключе: {key!r}")
    return order_id


def encode_order(order: Order) -> str:
    """
    Сериализует заказ в JSON.

    Raises:
        SerializationError: Модель не сериализуется
    """
    try:
        return order.model_dump_json()
    except PydanticSerializationError as e:
        raise SerializationError(f"Не удалось сериализовать заказ {order.order_id}: {e}") from e


def decode_order(data: str | bytes, key: str | None = None, expected_id: int | None = None) -> Order:
    """
    Десериализует заказ из JSON.

    Args:
        data: Значение из Redis (байты не декодируются заранее)
        key: Ключ записи, для сообщения об ошибке
        expected_id: ID, которому должна принадлежать запись

    Raises:
        SerializationError: Запись повреждена, не соответствует модели
            или лежит под чужим ключом
    """
    try:
        order = Order.model_validate_json(data)
    except (ValidationError, UnicodeDecodeError) as e:
        detail = f"{e.error_count()} ошибок" if isinstance(e, ValidationError) else "не UTF-8"
        raise SerializationError(f"Повреждённая запись заказа {key or ''}: {detail}", key=key) from e

    if expected_id is not None and order.order_id != expected_id:
        raise SerializationError(
            f"Запись {key or ''} содержит заказ {order.order_id}, ожидался {expected_id}",
            key=key,
        )
    return order
