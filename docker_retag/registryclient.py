#!/usr/bin/env python

"""Asynchronous Docker Registry manifest client."""

import asyncio
import logging

from http import HTTPStatus
from typing import Dict, Optional

import www_authenticate

from aiohttp import (
    AsyncResolver,
    ClientError,
    ClientResponse,
    ClientSession,
    TCPConnector,
)
from aiohttp.typedefs import LooseHeaders

from .config import RetagConfig
from .credentials import CredentialResolver
from .errors import DecodeError, NetworkError, ProtocolError
from .imagereference import ImageReference
from .manifest import Manifest
from .specs import (
    DockerAuthentication,
    DockerMediaTypes,
    GENERIC_OAUTH2_URL_PATTERN,
)
from .typing import RegistryClientGetManifest, RegistryClientPutManifest

LOGGER = logging.getLogger(__name__)


class RegistryClient:
    """
    AIOHTTP based client for the manifest endpoints of the Docker Registry.
    """

    DEFAULT_MEDIA_TYPE_MANIFEST = DockerMediaTypes.DISTRIBUTION_MANIFEST_V2

    def __init__(
        self,
        *,
        client_session: ClientSession = None,
        client_session_kwargs: Dict = None,
        config: RetagConfig = None,
        credential_resolver: CredentialResolver = None,
    ):
        """
        Args:
            client_session: The underlying client session to use when making connections.
            client_session_kwargs: Arguments to be passed to the client session.
            config: The run configuration.
            credential_resolver: Resolver used to retrieve registry credentials.
        """
        if not config:
            config = RetagConfig.from_environment()
        if not credential_resolver:
            credential_resolver = CredentialResolver(config)

        self.client_session = client_session
        self.client_session_kwargs = client_session_kwargs or {}
        self.config = config
        self.credential_resolver = credential_resolver
        # Endpoint -> scope -> token
        self.tokens = {}  # type: Dict[str, Dict[str, Optional[str]]]

    async def __aenter__(self) -> "RegistryClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self):
        """Gracefully closes this instance."""
        if self.client_session:
            await self.client_session.close()
        self.client_session = None

    async def _get_auth_token(
        self, *, credentials: str = None, endpoint: str, scope: str
    ) -> Optional[str]:
        """
        Retrieves the registry auth token for a given scope.

        Args:
            credentials: The credentials to use to retrieve the auth token.
            endpoint: Registry endpoint for which to retrieve the token.
            scope: The scope of the auth token.

        Returns:
            The corresponding auth token, or None if the endpoint does not issue bearer challenges.
        """
        # https://github.com/docker/distribution/blob/master/docs/spec/auth/token.md
        # Retrieve the www-authenticate response header from the registry endpoint ...
        url = f"{self.config.get_protocol()}://{endpoint}/v2/"
        client_response = await self._request("get", url)
        if (
            client_response.status != HTTPStatus.UNAUTHORIZED
            or "Www-Authenticate" not in client_response.headers
        ):
            return None
        challenge = client_response.headers["Www-Authenticate"]
        try:
            auth_params = www_authenticate.parse(challenge)
        except ValueError as exception:
            raise ProtocolError(
                url, client_response.status, f"Invalid challenge: {challenge}"
            ) from exception
        # Note: Www-Authenticate can also specify "basic".
        if "bearer" not in auth_params:
            return None
        bearer = auth_params["bearer"]
        if not isinstance(bearer, dict) or not bearer.get("realm"):
            raise ProtocolError(
                url,
                client_response.status,
                f"Bearer challenge without realm: {challenge}",
            )

        # Retrieve the bearer token from the authorization endpoint ...
        headers = {}
        if credentials:
            headers["Authorization"] = f"Basic {credentials}"
        url = GENERIC_OAUTH2_URL_PATTERN.format(
            bearer["realm"], bearer.get("service", endpoint), scope
        )
        client_response = await self._request("get", url, headers=headers)
        if client_response.status != HTTPStatus.OK:
            raise ProtocolError(url, client_response.status, client_response.reason)
        try:
            payload = await client_response.json(content_type=None)
        except ValueError as exception:
            raise DecodeError(f"{url}: invalid token response") from exception
        if not isinstance(payload, dict):
            raise DecodeError(f"{url}: invalid token response")
        token = payload.get("token") or payload.get("access_token")
        if not isinstance(token, str):
            raise DecodeError(f"{url}: token response does not contain a token")
        return token

    async def _get_client_session(self) -> ClientSession:
        """
        Initializes and / or retrieves an AIOHTTP client session.

        Returns:
            The AIOHTTP client session.
        """
        if not self.client_session:
            if "connector" not in self.client_session_kwargs:
                self.client_session_kwargs["connector"] = TCPConnector(
                    resolver=AsyncResolver()
                )
            if "trust_env" not in self.client_session_kwargs:
                self.client_session_kwargs["trust_env"] = True
            self.client_session = ClientSession(**self.client_session_kwargs)

        return self.client_session

    async def _get_request_headers(
        self, *, reference: ImageReference, headers: LooseHeaders = None, scope=None
    ) -> LooseHeaders:
        """
        Generates request headers that contain registry credentials for a given registry endpoint.

        Args:
            reference: Image reference for which to retrieve the request headers.
            headers: Optional supplemental request headers to be returned.
        Keyword Args:
            scope: Scope to use when requesting an authentication token.

        Returns:
            The generated request headers.
        """
        if not headers:
            headers = {}

        if "User-Agent" not in headers:
            # Note: This cannot be imported above, as it causes a circular import!
            from . import __version__  # pylint: disable=import-outside-toplevel

            headers["User-Agent"] = f"docker-retag/{__version__}"

        credentials = await self.credential_resolver.resolve(reference.endpoint)
        token = None
        if self.config.token_auth and scope:
            token = await self._get_token(
                credentials=credentials, endpoint=reference.endpoint, scope=scope
            )
        if token:
            headers["Authorization"] = f"Bearer {token}"
        elif credentials:
            headers["Authorization"] = f"Basic {credentials}"

        return headers

    async def _get_token(
        self, *, credentials: str = None, endpoint: str, scope: str
    ) -> Optional[str]:
        """
        Retrieves the registry auth token for a given endpoint, from cache when possible.

        Args:
            credentials: The credentials to use to retrieve the auth token.
            endpoint: Registry endpoint for which to retrieve the token.
            scope: The scope of the auth token.

        Returns:
            The corresponding registry auth token, or None.
        """
        tokens = self.tokens.setdefault(endpoint, {})
        if scope not in tokens:
            tokens[scope] = await self._get_auth_token(
                credentials=credentials, endpoint=endpoint, scope=scope
            )
        return tokens[scope]

    async def _request(self, method: str, url: str, **kwargs) -> ClientResponse:
        """
        Issues a request and reads the response body.

        Args:
            method: The HTTP method.
            url: The request URL.

        Returns:
            The underlying client response, with its body already read.
        """
        client_session = await self._get_client_session()
        try:
            client_response = await client_session.request(method, url, **kwargs)
            await client_response.read()
        except (ClientError, asyncio.TimeoutError) as exception:
            raise NetworkError(url, exception) from exception
        LOGGER.debug("%s %s: %s", method.upper(), url, client_response.status)
        return client_response

    # Docker Registry V2 API methods

    async def get_manifest(
        self, reference: ImageReference, *, accept: str = None
    ) -> RegistryClientGetManifest:
        """
        Fetch the manifest identified by name and tag.

        Args:
            reference: The image reference.
            accept: The "Accept" HTTP request header.

        Returns:
            dict:
                client_response: The underlying client response.
                manifest: The corresponding Manifest.
        """
        if accept is None:
            accept = RegistryClient.DEFAULT_MEDIA_TYPE_MANIFEST
        headers = await self._get_request_headers(
            headers={"Accept": accept},
            reference=reference,
            scope=DockerAuthentication.SCOPE_REPOSITORY_PULL_PATTERN.format(
                reference.repository
            ),
        )
        url = reference.get_url(self.config.get_protocol())
        client_response = await self._request("get", url, headers=headers)
        if client_response.status != HTTPStatus.OK:
            raise ProtocolError(url, client_response.status, client_response.reason)

        data = await client_response.read()
        media_type = None
        if "Content-Type" in client_response.headers:
            media_type = client_response.content_type
        try:
            manifest = Manifest(data, media_type=media_type)
        except DecodeError as exception:
            raise DecodeError(f"{url}: {exception}") from exception
        LOGGER.debug("Retrieved manifest %s from: %s", manifest.get_digest(), reference)
        return RegistryClientGetManifest(
            client_response=client_response, manifest=manifest
        )

    async def put_manifest(
        self, reference: ImageReference, manifest: Manifest
    ) -> RegistryClientPutManifest:
        """
        Put the manifest identified by name and tag.

        Args:
            reference: The image reference.
            manifest: The image manifest.

        Returns:
            dict:
                client_response: The underlying client response.
                digest: The manifest digest returned by the server, or the local digest.
        """
        headers = await self._get_request_headers(
            headers={"Content-Type": manifest.get_media_type()},
            reference=reference,
            scope=DockerAuthentication.SCOPE_REPOSITORY_ALL_PATTERN.format(
                reference.repository
            ),
        )
        url = reference.get_url(self.config.get_protocol())
        client_response = await self._request(
            "put", url, data=manifest.get_bytes(), headers=headers
        )
        if client_response.status != HTTPStatus.CREATED:
            raise ProtocolError(url, client_response.status, client_response.reason)

        digest = manifest.get_digest()
        remote = client_response.headers.get("Docker-Content-Digest")
        if remote and remote != digest:
            LOGGER.warning(
                "Remote and local digests are inconsistent for %s: %s != %s",
                reference,
                remote,
                digest,
            )
            digest = remote
        LOGGER.debug("Published manifest %s to: %s", digest, reference)
        return RegistryClientPutManifest(client_response=client_response, digest=digest)
