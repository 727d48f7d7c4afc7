import os
from datetime import datetime, timedelta, timezone

from pytest_asyncio import fixture

from asset_ledger import ledger_factory

T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def ts(step: int) -> datetime:
    """The invocation timestamp `step` seconds after T0."""
    return T0 + timedelta(seconds=step)


def backend_url(backend: str, tmp_path) -> str:
    return {
        "memory": "memory://",
        "sqlite-memory": "sqlite://",
        "sqlite-file": f"sqlite:///{os.path.join(tmp_path, 'ledger.db')}",
    }[backend]


@fixture(params=["memory", "sqlite-memory", "sqlite-file"])
async def open_invocation(request, tmp_path):
    """Provides a clean open_invocation function per backend, wrapped in a resource-managing context."""
    config = {"url": backend_url(request.param, tmp_path), "pool_size": 2}
    async with ledger_factory(config) as open_invocation_func:
        yield open_invocation_func
