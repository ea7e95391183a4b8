#!/usr/bin/env python

"""Command line interface tests."""

import io
import logging

from pathlib import Path
from typing import List

import pytest

from docker_retag import __version__, RetagConfig
from docker_retag import cli

from .testutils import FakeRegistry


@pytest.fixture
def runs(monkeypatch: pytest.MonkeyPatch) -> List:
    """Replaces the retag run with a recorder that succeeds unless a target is tagged 'fail'."""
    result = []

    async def _run(source: str, targets: List[str], config: RetagConfig) -> bool:
        result.append((source, targets, config))
        return not any(target.endswith(":fail") for target in targets)

    monkeypatch.setattr(cli, "run", _run)
    return result


def test_version(capsys: pytest.CaptureFixture, runs: List):
    """Test that the version is printed."""
    assert cli.main(["-v"]) == 0
    assert capsys.readouterr().out.strip() == f"docker-retag version: {__version__}"
    assert not runs


@pytest.mark.parametrize("argv", [[], ["hello-world:v1"], ["-u", "user", "image"]])
def test_usage(argv: List[str], capsys: pytest.CaptureFixture, runs: List):
    """Test that fewer than two images prints usage and fails."""
    assert cli.main(argv) == 1
    assert "usage: docker-retag" in capsys.readouterr().out
    assert not runs


def test_main(monkeypatch: pytest.MonkeyPatch, runs: List):
    """Test that images and explicit credentials are passed through."""
    monkeypatch.setenv("DOCKER_USER", "env")
    monkeypatch.setenv("INSECURE_REGISTRY", "true")
    assert cli.main(["-u", "user", "-p", "pass", "image:v1", "image:a", "image:b"]) == 0
    source, targets, config = runs[0]
    assert source == "image:v1"
    assert targets == ["image:a", "image:b"]
    assert config.username == "user"
    assert config.password == "pass"
    assert config.env_username == "env"
    assert config.insecure


def test_main_failure(runs: List):
    """Test that a failed run exits nonzero."""
    assert cli.main(["image:v1", "image:a", "image:fail"]) == 1
    assert len(runs) == 1


def test_main_password_stdin(monkeypatch: pytest.MonkeyPatch, runs: List):
    """Test that the password can be read from stdin."""
    monkeypatch.setattr("sys.stdin", io.StringIO("secret\n"))
    assert cli.main(["-u", "user", "-p", "ignored", "-P", "image:v1", "image:a"]) == 0
    assert runs[0][2].password == "secret"


def test_main_invalid_reference(monkeypatch: pytest.MonkeyPatch):
    """Test that an invalid reference exits nonzero."""
    monkeypatch.setenv("DOCKER_RETAG_CREDENTIALS_STORE", "/nonexistent/config.json")
    assert cli.main(["endpoint.io/", "image:a"]) == 1


@pytest.mark.asyncio
@pytest.mark.usefixtures("no_proxy")
async def test_run(registry: FakeRegistry, config: RetagConfig):
    """Test a retag run against a registry."""
    registry.add_manifest("hello-world", "v1")
    assert await cli.run(
        f"{registry.endpoint}/hello-world:v1",
        [f"{registry.endpoint}/hello-world:main"],
        config,
    )
    assert ("hello-world", "main") in registry.manifests


@pytest.mark.asyncio
@pytest.mark.usefixtures("no_proxy")
async def test_run_failure(registry: FakeRegistry, config: RetagConfig):
    """Test that fetch and publish failures are reported as failed runs."""
    source = f"{registry.endpoint}/hello-world:v1"
    assert not await cli.run(source, [f"{registry.endpoint}/hello-world:main"], config)

    registry.add_manifest("hello-world", "v1")
    registry.statuses[("PUT", "hello-world", "main")] = 403
    assert not await cli.run(source, [f"{registry.endpoint}/hello-world:main"], config)


@pytest.mark.asyncio
@pytest.mark.usefixtures("no_proxy")
async def test_run_resolution_error(
    caplog: pytest.LogCaptureFixture, registry: FakeRegistry, tmp_path: Path
):
    """Test that an unusable credentials store fails the run without blaming the fetch."""
    registry.add_manifest("hello-world", "v1")
    config = RetagConfig(credentials_store=tmp_path, insecure=True)
    with caplog.at_level(logging.ERROR, logger="docker_retag.cli"):
        assert not await cli.run(
            f"{registry.endpoint}/hello-world:v1",
            [f"{registry.endpoint}/hello-world:main"],
            config,
        )
    messages = [record.getMessage() for record in caplog.records]
    assert any(
        message.startswith(f"Unable to retag {registry.endpoint}/hello-world:v1:")
        and "Unable to load credentials store" in message
        for message in messages
    )
    assert not any("manifest" in message.lower() for message in messages)
    assert not registry.requests
