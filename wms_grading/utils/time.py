import asyncio
from datetime import datetime, timezone

def now_utc() -> datetime:
    return datetime.now(timezone.utc)

async def pause(ms: float) -> None:
    """Sleep for `ms` milliseconds; no-op for zero or negative values."""
    if ms > 0:
        await asyncio.sleep(ms / 1000.0)
