"""Run a blocking driver call off the event loop."""

import asyncio
from typing import Any, Callable

from pymongo.errors import ConnectionFailure

from ..BackendUnavailableError import BackendUnavailableError


async def _run_blocking(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    try:
        return await asyncio.to_thread(func, *args, **kwargs)
    except ConnectionFailure as e:
        raise BackendUnavailableError(f"Document store unreachable: {e}") from e
