"""Per-property write locks for the booking check-then-insert sequence."""

import asyncio
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

_locks: dict[uuid.UUID, asyncio.Lock] = {}
_waiters: dict[uuid.UUID, int] = {}


@asynccontextmanager
async def property_write_lock(property_id: uuid.UUID) -> AsyncIterator[None]:
    """Hold the in-process lock for ``property_id``.

    Only one coroutine at a time may run the overlap check and commit for a
    given property. Entries are dropped once no coroutine holds or awaits
    them, so the registry does not grow with the catalog.
    """
    lock = _locks.setdefault(property_id, asyncio.Lock())
    _waiters[property_id] = _waiters.get(property_id, 0) + 1
    try:
        async with lock:
            yield
    finally:
        _waiters[property_id] -= 1
        if _waiters[property_id] == 0:
            del _waiters[property_id]
            _locks.pop(property_id, None)
