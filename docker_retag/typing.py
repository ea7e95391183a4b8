#!/usr/bin/env python

# pylint: disable=missing-class-docstring,too-few-public-methods

"""Typing classes."""

from typing import NamedTuple, Optional, Tuple, TYPE_CHECKING

from aiohttp import ClientResponse

from .manifest import Manifest

if TYPE_CHECKING:
    from .imagereference import ImageReference  # pragma: no cover


class ImageReferenceParseString(NamedTuple):
    endpoint: Optional[str]
    repository: str
    tag: Optional[str]


class RegistryClientGetManifest(NamedTuple):
    client_response: ClientResponse
    manifest: Manifest


class RegistryClientPutManifest(NamedTuple):
    client_response: ClientResponse
    digest: str


class UploadJob(NamedTuple):
    manifest: Manifest
    reference: "ImageReference"


class UploadOutcome(NamedTuple):
    reference: "ImageReference"
    digest: Optional[str] = None
    error: Optional[Exception] = None


class RetagResult(NamedTuple):
    manifest: Optional[Manifest]
    outcomes: Tuple[UploadOutcome, ...]
    result: bool
    error: Optional[Exception] = None
