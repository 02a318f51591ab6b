# orders_api/common/context.py
"""
Контекст операции: дедлайн и флаг отмены.
Передаётся в каждый метод хранилища и далее в каждый вызов Redis.
"""

from __future__ import annotations

import time

from orders_api.common.exceptions import OperationCancelledError


class OperationContext:
    """
    Дедлайн и отмена для одной операции хранилища.

    Контекст не привязан к задаче asyncio: его можно отменить из любого места
    (например, обработчиком разрыва соединения), и следующий вызов хранилища
    завершится ошибкой без обращения к Redis.
    """

    def __init__(self, deadline: float | None = None) -> None:
        """
        Args:
            deadline: Момент истечения по time.monotonic() (None — без дедлайна)
        """
        self._deadline = deadline
        self._cancelled = False

    @classmethod
    def background(cls) -> OperationContext:
        """Контекст без дедлайна."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> OperationContext:
        """Контекст, истекающий через seconds секунд."""
        return cls(deadline=time.monotonic() + seconds)

    @property
    def deadline(self) -> float | None:
        return self._deadline

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def cancel(self) -> None:
        """Отменяет операцию."""
        self._cancelled = True

    def remaining(self) -> float | None:
        """Сколько секунд осталось до дедлайна (None — без ограничения)."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def check(self) -> None:
        """
        Проверяет, можно ли продолжать операцию.

        Raises:
            OperationCancelledError: Контекст отменён или дедлайн истёк
        """
        if self._cancelled:
            raise OperationCancelledError("Операция отменена")
        if self.expired:
            raise OperationCancelledError("Дедлайн операции истёк")
