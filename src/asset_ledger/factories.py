"""
This module selects a world-state backend from a configuration dict.

`ledger_factory` is an async context manager that yields an `open_invocation`
function bound to the backend named by `config["url"]`. The backend's
resources live exactly as long as the `async with` block.
"""
from contextlib import asynccontextmanager
from typing import Dict
import os
import urllib.parse

from .adaptors.memory import memory_ledger_factory
from .adaptors.sqlite import sqlite_ledger_factory


def _sqlite_db_path(url: str) -> str:
    parsed = urllib.parse.urlparse(url)
    db_path = parsed.path
    if os.name == 'nt' and db_path.startswith('/') and not db_path.startswith('//'):
        db_path = db_path[1:]
    elif db_path.startswith('//'):
        # sqlite:///{abs_path} leaves an extra slash in front of an absolute path.
        db_path = '/' + db_path.lstrip('/')
    if not db_path or db_path == '/':
        db_path = ':memory:'
    return db_path


@asynccontextmanager
async def ledger_factory(config: Dict):
    # If no URL is provided, default to the in-memory world state.
    url = config.get('url') or 'memory://'
    scheme = url.split('://', 1)[0] if '://' in url else ''

    if scheme == 'memory':
        factory = memory_ledger_factory()
    elif scheme == 'sqlite':
        factory = sqlite_ledger_factory(
            _sqlite_db_path(url),
            cache_size_kib=config.get('cache_size_kib', -16384),
            pool_size=config.get('pool_size', 10),
        )
    else:
        raise ValueError(f"Unsupported scheme: {scheme}. Only 'memory' and 'sqlite' are supported.")

    async with factory as open_invocation:
        yield open_invocation
