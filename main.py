#!/usr/bin/env python3
# main.py
"""
Точка входа сервиса заказов.
Запускает HTTP API (uvicorn). SIGINT/SIGTERM обрабатывает uvicorn:
новые запросы перестают приниматься, текущие дорабатывают,
затем lifespan закрывает подключение к Redis.
"""

from __future__ import annotations

import asyncio
import sys

import uvicorn

from orders_api.common.constants import TypeMsg
from orders_api.common.logger import log_error, log_info, setup_logging
from orders_api.config import settings


async def main(host: str | None = None, port: int | None = None) -> None:
    """
    Запуск HTTP API.

    Args:
        host: Адрес (по умолчанию из конфига)
        port: Порт (по умолчанию из конфига)
    """
    setup_logging()

    host = host or settings.api.API_HOST
    port = port or settings.api.API_PORT

    await log_info(
        f"Orders API v{settings.system.VERSION} — запуск на {host}:{port}",
        type_msg=TypeMsg.INFO,
    )

    config = uvicorn.Config(
        "orders_api.services.orders_service.app:app",
        host=host,
        port=port,
        log_level="debug" if settings.system.DEBUG else "info",
    )
    server = uvicorn.Server(config)

    try:
        await server.serve()
    except Exception as e:
        await log_error(f"Сервер завершился с ошибкой: {e}", exc_info=True)
        raise
    finally:
        await log_info("Orders API остановлен", type_msg=TypeMsg.INFO)


def print_usage() -> None:
    print("""
Использование:
    python main.py              # адрес и порт из config/config.json
    python main.py 8080         # другой порт
""")


if __name__ == "__main__":
    cli_port: int | None = None

    if len(sys.argv) > 1:
        arg = sys.argv[1].lower()
        if arg in ("--help", "-h"):
            print_usage()
            sys.exit(0)
        if not arg.isdigit():
            print(f"Ошибка: неверный порт '{arg}'")
            print_usage()
            sys.exit(1)
        cli_port = int(arg)

    try:
        asyncio.run(main(port=cli_port))
    except KeyboardInterrupt:
        pass
