"""Run a coroutine against a short-lived shared connection."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from ..config.TotemConfig import TotemConfig
from .ConnectionProvider import ConnectionProvider

T = TypeVar("T")


def _run_with_provider(config: TotemConfig, func: Callable[[ConnectionProvider], Awaitable[T]]) -> T:
    async def _main() -> T:
        provider = ConnectionProvider.from_config(config)
        try:
            return await func(provider)
        finally:
            await provider.shutdown()

    return asyncio.run(_main())
