# tests/core/test_orders_codec.py
"""
Тесты формата хранения заказов: ключи и JSON.
"""

from __future__ import annotations

import json

import pytest

from orders_api.common.constants import MAX_ORDER_ID, OrderStatus
from orders_api.common.exceptions import OrderValidationError, SerializationError
from orders_api.core.orders.codec import (
    decode_order,
    encode_order,
    order_id_key,
    parse_order_key,
    validate_order_id,
)
from orders_api.core.orders.models import Order


class TestOrderKey:
    """Тесты ключей заказов."""

    def test_key_format(self) -> None:
        """Проверяет формат order:<id>."""
        assert order_id_key(1) == "order:1"
        assert order_id_key(MAX_ORDER_ID) == f"order:{MAX_ORDER_ID}"

    def test_distinct_ids_give_distinct_keys(self) -> None:
        """Проверяет, что разные ID не дают одинаковых ключей."""
        ids = [1, 2, 10, 11, 100, 101, 2**32, 2**63, MAX_ORDER_ID - 1, MAX_ORDER_ID]
        keys = {order_id_key(order_id) for order_id in ids}
        assert len(keys) == len(ids)

    @pytest.mark.parametrize("order_id", [1, 9, 10, 12345678901234567890, MAX_ORDER_ID])
    def test_parse_is_inverse(self, order_id: int) -> None:
        """Проверяет, что parse_order_key обращает order_id_key."""
        assert parse_order_key(order_id_key(order_id)) == order_id

    @pytest.mark.parametrize(
        "key",
        ["order:", "order:01", "order:-1", "order:+1", "order:0", "order:1a", "orders:1", "1", "order:١", f"order:{MAX_ORDER_ID + 1}"],
    )
    def test_parse_rejects_foreign_keys(self, key: str) -> None:
        """Проверяет отказ на неканоничных и чужих ключах."""
        with pytest.raises(ValueError):
            parse_order_key(key)


class TestValidateOrderId:
    """Тесты проверки ID."""

    @pytest.mark.parametrize("order_id", [0, -1, MAX_ORDER_ID + 1])
    def test_out_of_range(self, order_id: int) -> None:
        with pytest.raises(OrderValidationError):
            validate_order_id(order_id)

    @pytest.mark.parametrize("order_id", [None, "1", 1.0, True])
    def test_not_an_int(self, order_id: object) -> None:
        with pytest.raises(OrderValidationError):
            validate_order_id(order_id)  # type: ignore[arg-type]

    def test_valid(self) -> None:
        assert validate_order_id(42) == 42


class TestOrderSerialization:
    """Тесты сериализации заказа."""

    def test_round_trip_full_order(self, full_order: Order) -> None:
        """Проверяет decode(encode(o)) == o для заказа со всеми полями."""
        assert decode_order(encode_order(full_order)) == full_order

    def test_round_trip_minimal_order(self) -> None:
        """Проверяет round-trip для заказа только с ID."""
        order = Order(order_id=1)
        assert decode_order(encode_order(order)) == order

    def test_encoded_value_is_json(self, full_order: Order) -> None:
        """Проверяет, что значение — JSON с ожидаемыми полями."""
        data = json.loads(encode_order(full_order))

        assert data["order_id"] == 2**64 - 1
        assert data["status"] == OrderStatus.SHIPPED.value
        assert data["line_items"][0]["quantity"] == 2
        assert data["completed_at"] is None

    @pytest.mark.parametrize(
        "payload",
        [
            "not json",
            "{}",
            '{"order_id": 0}',
            '{"order_id": 1, "status": "teleported"}',
            '{"order_id": 1, "line_items": [{"quantity": 1}]}',
        ],
    )
    def test_decode_corrupted(self, payload: str) -> None:
        """Проверяет, что битые записи дают SerializationError."""
        with pytest.raises(SerializationError) as exc_info:
            decode_order(payload, key="order:1")

        assert exc_info.value.key == "order:1"

    def test_decode_bytes(self, full_order: Order) -> None:
        """Значение из Redis приходит байтами."""
        assert decode_order(encode_order(full_order).encode("utf-8")) == full_order

    @pytest.mark.parametrize("payload", [b"\xff\xfe garbage", b'{"order_id": 1, "status": "\xff"}'])
    def test_decode_not_utf8(self, payload: bytes) -> None:
        with pytest.raises(SerializationError):
            decode_order(payload, key="order:1")

    def test_decode_foreign_id(self) -> None:
        """Запись с другим order_id под ключом считается повреждённой."""
        with pytest.raises(SerializationError) as exc_info:
            decode_order(encode_order(Order(order_id=2)), key="order:1", expected_id=1)

        assert exc_info.value.key == "order:1"
