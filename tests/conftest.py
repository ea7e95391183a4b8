#!/usr/bin/env python

"""Configures execution of pytest."""

from pathlib import Path

import pytest
import pytest_asyncio

from aiohttp.test_utils import TestServer

from docker_retag import RegistryClient, RetagConfig

from .testutils import FakeRegistry


@pytest.fixture
def credentials_store(tmp_path: Path) -> Path:
    """Provides the path of a (not yet existing) credentials store."""
    return tmp_path.joinpath("config.json")


@pytest.fixture
def config(credentials_store: Path) -> RetagConfig:
    """Provides a configuration that connects over http and ignores the environment."""
    return RetagConfig(credentials_store=credentials_store, insecure=True)


@pytest_asyncio.fixture
async def registry() -> FakeRegistry:
    """Provides a running in-process registry."""
    fake_registry = FakeRegistry()
    server = TestServer(fake_registry.application)
    await server.start_server()
    fake_registry.endpoint = f"{server.host}:{server.port}"
    try:
        yield fake_registry
    finally:
        await server.close()


@pytest_asyncio.fixture
async def registry_client(config: RetagConfig) -> RegistryClient:
    """Provides a RegistryClient instance."""
    # Do not honor proxy settings when connecting to the in-process registry
    async with RegistryClient(
        client_session_kwargs={"trust_env": False}, config=config
    ) as registry_client:
        yield registry_client


@pytest.fixture
def no_proxy(monkeypatch: pytest.MonkeyPatch):
    """Removes proxy settings from the environment."""
    for name in ["HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY"]:
        monkeypatch.delenv(name, raising=False)
        monkeypatch.delenv(name.lower(), raising=False)
