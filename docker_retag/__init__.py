#!/usr/bin/env python

"""Retags docker images by republishing their manifests, without transferring layers."""

from .config import RetagConfig
from .credentials import CredentialResolver
from .errors import (
    DecodeError,
    NetworkError,
    ProtocolError,
    ResolutionError,
    RetagError,
)
from .imagereference import ImageReference
from .manifest import Descriptor, Manifest
from .registryclient import RegistryClient
from .retag import retag
from .specs import DockerMediaTypes, Indices

__version__ = "0.1.0"
