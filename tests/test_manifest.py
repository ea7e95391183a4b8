#!/usr/bin/env python

"""Manifest tests."""

import hashlib
import json

import pytest

from docker_retag import DecodeError, Descriptor, DockerMediaTypes, Manifest

from .testutils import MANIFEST_BYTES


def test___init__():
    """Test that an image manifest can be instantiated."""
    manifest = Manifest(MANIFEST_BYTES)
    assert manifest.schema_version == 2
    assert manifest.get_media_type() == DockerMediaTypes.DISTRIBUTION_MANIFEST_V2
    assert manifest.get_config() == Descriptor(
        media_type=DockerMediaTypes.CONTAINER_IMAGE_V1,
        digest="sha256:feb5d9fea6a5e9606aa995e879d862b825965ba48de054caab5ef356dc6b3412",
        size=1469,
    )
    layers = manifest.get_layers()
    assert len(layers) == 1
    assert layers[0].media_type == DockerMediaTypes.IMAGE_ROOTFS_DIFF
    assert layers[0].size == 2479


def test_get_bytes():
    """Test that the raw bytes are retained verbatim."""
    manifest = Manifest(MANIFEST_BYTES)
    assert manifest.get_bytes() is MANIFEST_BYTES
    assert bytes(manifest) == MANIFEST_BYTES
    assert str(manifest) == MANIFEST_BYTES.decode("utf-8")


def test_get_digest():
    """Test digest calculation over the raw bytes."""
    manifest = Manifest(MANIFEST_BYTES)
    assert manifest.get_digest() == f"sha256:{hashlib.sha256(MANIFEST_BYTES).hexdigest()}"


def test_get_json():
    """Test that the decoded manifest cannot be mutated."""
    manifest = Manifest(MANIFEST_BYTES)
    _json = manifest.get_json()
    _json["layers"].clear()
    assert manifest.get_json()["layers"]
    assert manifest.get_json()["annotations"] == {"org.example.note": "kept verbatim"}


def test_get_media_type():
    """Test that a declared media type wins over the provided one."""
    manifest = Manifest(MANIFEST_BYTES, media_type="application/json")
    assert manifest.get_media_type() == DockerMediaTypes.DISTRIBUTION_MANIFEST_V2

    _json = json.loads(MANIFEST_BYTES)
    del _json["mediaType"]
    data = json.dumps(_json).encode("utf-8")
    assert Manifest(data, media_type="application/json").get_media_type() == (
        "application/json"
    )
    assert Manifest(data).get_media_type() == DockerMediaTypes.DISTRIBUTION_MANIFEST_V2


def _mutate(**kwargs) -> bytes:
    _json = json.loads(MANIFEST_BYTES)
    for key, value in kwargs.items():
        if value is None:
            del _json[key]
        else:
            _json[key] = value
    return json.dumps(_json).encode("utf-8")


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"not json",
        b"\xff\xfe",
        b"[]",
        b'"string"',
        _mutate(schemaVersion=1),
        _mutate(schemaVersion=None),
        _mutate(config=None),
        _mutate(config="sha256:abc"),
        _mutate(config={"mediaType": "a", "digest": "b"}),
        _mutate(config={"mediaType": "a", "digest": "b", "size": True}),
        _mutate(layers=None),
        _mutate(layers={}),
        _mutate(layers=[{"mediaType": "a", "size": 1}]),
        _mutate(mediaType=DockerMediaTypes.DISTRIBUTION_MANIFEST_LIST_V2),
        _mutate(manifests=[]),
    ],
)
def test_decode_error(data: bytes):
    """Test that bodies that are not schema 2 image manifests are rejected."""
    with pytest.raises(DecodeError):
        Manifest(data)
