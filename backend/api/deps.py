from __future__ import annotations

from typing import Iterator

import httpx


SHEETS_HTTP_TIMEOUT_SECONDS = 30.0


def get_sheets_client() -> Iterator[httpx.Client]:
    client = httpx.Client(timeout=SHEETS_HTTP_TIMEOUT_SECONDS)
    try:
        yield client
    finally:
        client.close()
