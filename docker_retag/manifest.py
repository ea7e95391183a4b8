#!/usr/bin/env python

"""
Abstraction of a docker image manifest (schema version 2), as defined in:

* https://github.com/docker/distribution/blob/master/docs/spec/manifest-v2-2.md
"""

import hashlib
import json

from copy import deepcopy
from typing import List, NamedTuple

from .errors import DecodeError
from .specs import DockerMediaTypes, OCIMediaTypes


class Descriptor(NamedTuple):
    """Reference to a content-addressed blob."""

    media_type: str
    digest: str
    size: int

    @staticmethod
    def from_json(_json) -> "Descriptor":
        """
        Initializes a Descriptor from a decoded JSON object.

        Args:
            _json: The decoded descriptor.

        Returns:
            The newly initialized object.
        """
        if not isinstance(_json, dict):
            raise DecodeError(f"Descriptor is not an object: {_json!r}")
        media_type = _json.get("mediaType")
        digest = _json.get("digest")
        size = _json.get("size")
        if not isinstance(media_type, str) or not isinstance(digest, str):
            raise DecodeError(f"Descriptor is missing mediaType or digest: {_json!r}")
        if not isinstance(size, int) or isinstance(size, bool):
            raise DecodeError(f"Descriptor size is not an integer: {_json!r}")
        return Descriptor(media_type=media_type, digest=digest, size=size)


class Manifest:
    """
    Image manifest that retains the exact bytes it was created from.
    """

    def __init__(self, manifest: bytes, *, media_type: str = None):
        """
        Args:
            manifest: The raw image manifest value.
            media_type: The media type of the image manifest, used only when the
                        manifest does not declare one.
        """
        self.bytes = manifest
        try:
            self.json = json.loads(manifest)
        except (TypeError, UnicodeDecodeError, ValueError) as exception:
            raise DecodeError(f"Manifest is not valid JSON: {exception}") from exception
        if not isinstance(self.json, dict):
            raise DecodeError("Manifest is not a JSON object")
        if "manifests" in self.json or self.json.get("mediaType") in [
            DockerMediaTypes.DISTRIBUTION_MANIFEST_LIST_V2,
            OCIMediaTypes.IMAGE_INDEX_V1,
        ]:
            raise DecodeError("Manifest lists are not supported")

        self.media_type = self.json.get(
            "mediaType", media_type or DockerMediaTypes.DISTRIBUTION_MANIFEST_V2
        )
        if not isinstance(self.media_type, str):
            raise DecodeError(f"Invalid mediaType: {self.media_type!r}")
        self.schema_version = self.json.get("schemaVersion")
        if self.schema_version != 2:
            raise DecodeError(f"Unsupported schemaVersion: {self.schema_version!r}")

        self.config = Descriptor.from_json(self.json.get("config"))
        layers = self.json.get("layers")
        if not isinstance(layers, list):
            raise DecodeError("Manifest layers is not a list")
        self.layers = [Descriptor.from_json(layer) for layer in layers]

    def __bytes__(self):
        return self.get_bytes()

    def __str__(self):
        return self.get_bytes().decode("utf-8")

    def get_bytes(self) -> bytes:
        """
        Retrieves the raw manifest bytes.

        Returns:
            The raw manifest bytes, exactly as received.
        """
        return self.bytes

    def get_config(self) -> Descriptor:
        """Retrieves the image configuration descriptor."""
        return self.config

    def get_digest(self) -> str:
        """
        Retrieves the SHA256 digest value of the raw bytes value.

        Returns:
            The algorithm prefixed digest value.
        """
        return f"sha256:{hashlib.sha256(self.get_bytes()).hexdigest()}"

    def get_json(self):
        """
        Retrieves the manifest in JSON form.

        Returns:
            A copy of the decoded manifest.
        """
        return deepcopy(self.json)

    def get_layers(self) -> List[Descriptor]:
        """Retrieves the layer descriptors, in order."""
        return list(self.layers)

    def get_media_type(self) -> str:
        """
        Retrieves the media type of the image manifest.

        Returns:
            The media type of the image manifest.
        """
        return self.media_type
