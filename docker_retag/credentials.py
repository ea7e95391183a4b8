#!/usr/bin/env python

"""Registry credential resolution."""

import base64
import json
import logging

from typing import Dict, Optional
from urllib.parse import urlparse

import aiofiles

from .config import RetagConfig
from .errors import ResolutionError

LOGGER = logging.getLogger(__name__)


def encode_credentials(username: str, password: str) -> str:
    """
    Encodes a username and password as a basic authentication token.

    Args:
        username: The registry username.
        password: The registry password.

    Returns:
        The base64 encoded "<username>:<password>" value.
    """
    return base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("utf-8")


def get_endpoint(endpoint: str) -> str:
    """Converts a credentials store key to a bare endpoint address."""

    # Legacy endpoint formats included the protocol and path segments; convert them to netloc / address ...
    # Note: urlparse stores 'netloc' in 'path' if no protocol is specified.
    if "://" not in endpoint:
        endpoint = f"proto://{endpoint}"
    return urlparse(endpoint).netloc


class CredentialResolver:
    """
    Resolves basic authentication tokens for registry endpoints.
    """

    def __init__(self, config: RetagConfig):
        """
        Args:
            config: The run configuration providing credentials and the credentials store path.
        """
        self.config = config
        # Endpoint -> credentials
        self.credentials = None  # type: Optional[Dict[str, str]]

    async def _load_credentials(self) -> Dict[str, str]:
        """Retrieves the registry credentials from the docker registry credentials store."""
        result = {}
        path = self.config.credentials_store
        if not path:
            return result

        LOGGER.debug("Loading credentials from store: %s", path)
        try:
            async with aiofiles.open(path, mode="rb") as file:
                content = json.loads(await file.read())
        except FileNotFoundError:
            LOGGER.debug("Credentials store not found: %s", path)
            return result
        except OSError as exception:
            raise ResolutionError(path, str(exception)) from exception
        except ValueError as exception:
            raise ResolutionError(path, f"invalid JSON: {exception}") from exception

        if not isinstance(content, dict):
            raise ResolutionError(path, "top-level value is not an object")
        auths = content.get("auths", {})
        if not isinstance(auths, dict):
            raise ResolutionError(path, "'auths' is not an object")
        for key, entry in auths.items():
            if not isinstance(entry, dict):
                raise ResolutionError(path, f"entry for '{key}' is not an object")
            auth = entry.get("auth")
            if auth is None:
                continue
            if not isinstance(auth, str):
                raise ResolutionError(path, f"'auth' for '{key}' is not a string")
            if not auth:
                continue
            endpoint = get_endpoint(key)
            # Exact keys win over normalized legacy keys
            if key == endpoint or endpoint not in result:
                result[endpoint] = auth
        return result

    async def resolve(self, endpoint: str) -> Optional[str]:
        """
        Resolves the credentials for a given endpoint.

        Args:
            endpoint: Registry endpoint (<hostname>[:<port>]) for which to resolve the credentials.

        Returns:
            The base64 encoded registry credentials, or None.
        """
        if self.config.username and self.config.password:
            LOGGER.debug("Using explicit credentials for: %s", endpoint)
            return encode_credentials(self.config.username, self.config.password)

        if self.config.env_username and self.config.env_password:
            LOGGER.debug("Using environment credentials for: %s", endpoint)
            return encode_credentials(
                self.config.env_username, self.config.env_password
            )

        if self.credentials is None:
            self.credentials = await self._load_credentials()
        result = self.credentials.get(endpoint)
        if result:
            LOGGER.debug("Using credentials store for: %s", endpoint)
        else:
            LOGGER.debug("No credentials found for: %s", endpoint)
        return result
