import asyncio

import httpx

from medalert.config import ClientConfig
from medalert.services.remote_data import RemoteDataClient

BASE_URL = "http://backend.test/exec"


def _run(coro):
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None
    if loop and loop.is_running():
        return asyncio.run_coroutine_threadsafe(coro, loop).result(timeout=30)
    return asyncio.run(coro)


def mock_client(handler, timeout_ms: int = 30000) -> RemoteDataClient:
    return RemoteDataClient(
        ClientConfig(api_url=BASE_URL, timeout_ms=timeout_ms),
        transport=httpx.MockTransport(handler),
    )


def asgi_client(app, timeout_ms: int = 30000) -> RemoteDataClient:
    return RemoteDataClient(
        ClientConfig(api_url=BASE_URL, timeout_ms=timeout_ms),
        transport=httpx.ASGITransport(app=app),
    )
