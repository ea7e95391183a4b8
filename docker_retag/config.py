#!/usr/bin/env python

"""Immutable run configuration."""

import os

from pathlib import Path
from typing import Mapping, NamedTuple, Optional

DEFAULT_CREDENTIALS_STORE = Path.home().joinpath(".docker/config.json")


class RetagConfig(NamedTuple):
    """
    Settings shared by the credential resolver and the registry client.

    Explicit credentials (username / password) take precedence over the environment
    credentials (env_username / env_password), which take precedence over the
    credentials store.
    """

    username: Optional[str] = None
    password: Optional[str] = None
    env_username: Optional[str] = None
    env_password: Optional[str] = None
    insecure: bool = False
    credentials_store: Optional[Path] = DEFAULT_CREDENTIALS_STORE
    token_auth: bool = False

    @staticmethod
    def from_environment(
        *,
        environ: Mapping[str, str] = None,
        password: str = None,
        username: str = None,
    ) -> "RetagConfig":
        """
        Captures the process environment into a new configuration.

        Keyword Args:
            environ: Mapping to read instead of os.environ.
            password: Explicit registry password.
            username: Explicit registry username.

        Returns:
            The newly initialized object.
        """
        if environ is None:
            environ = os.environ
        return RetagConfig(
            username=username,
            password=password,
            env_username=environ.get("DOCKER_USER"),
            env_password=environ.get("DOCKER_PASS"),
            insecure=environ.get("INSECURE_REGISTRY") == "true",
            credentials_store=Path(
                environ.get("DOCKER_RETAG_CREDENTIALS_STORE", DEFAULT_CREDENTIALS_STORE)
            ),
            token_auth=environ.get("DOCKER_RETAG_TOKEN_AUTH") == "true",
        )

    def get_protocol(self) -> str:
        """Retrieves the protocol used to connect to registries."""
        return "http" if self.insecure else "https"
