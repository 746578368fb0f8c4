import asyncio
from typing import Awaitable, TypeVar

from fastapi import Request

from bridge.core.errors import ClientDisconnected

T = TypeVar("T")


async def cancel_on_disconnect(request: Request, awaitable: Awaitable[T], poll_interval: float = 0.5) -> T:
    """
    Await an upstream call, cancelling it if the inbound client disconnects.

    Only call once the request body has been consumed; polling for disconnect
    reads from the receive channel.
    """
    task = asyncio.ensure_future(awaitable)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()
            if await request.is_disconnected():
                task.cancel()
                raise ClientDisconnected()
    finally:
        if not task.done():
            task.cancel()
