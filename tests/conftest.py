from __future__ import annotations

import httpx
import pytest
import pytest_asyncio

from adapters.http_client import PlatformClient
from core.config import AppSettings
from tests.fakes import BASE_URL, INTEGRATION_TOKEN, FakePlatform


@pytest.fixture
def settings(tmp_path) -> AppSettings:
    return AppSettings(
        api_url=BASE_URL,
        api_token=INTEGRATION_TOKEN,
        poll_interval_seconds=0.01,
        static_dir=tmp_path / "static",
    )


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


@pytest_asyncio.fixture
async def client(settings: AppSettings, platform: FakePlatform):
    async with httpx.AsyncClient(transport=platform.transport()) as http:
        yield PlatformClient(settings, client=http)
