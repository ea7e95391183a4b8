#!/usr/bin/env python

"""Typed errors raised while retagging."""

from typing import Optional


class RetagError(Exception):
    """Base exception for all docker-retag errors."""


class ResolutionError(RetagError):
    """Raised when the registry credentials store exists but cannot be used."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Unable to load credentials store {path}: {reason}")


class NetworkError(RetagError):
    """Raised when a registry cannot be reached."""

    def __init__(self, url: str, cause: Exception):
        self.url = url
        self.cause = cause
        super().__init__(f"Unable to reach {url}: {cause!r}")


class ProtocolError(RetagError):
    """Raised when a registry answers with an unexpected HTTP status."""

    def __init__(self, url: str, status: int, reason: Optional[str] = None):
        self.url = url
        self.status = status
        self.reason = reason
        super().__init__(f"{status} {reason or ''}".rstrip() + f" ({url})")


class DecodeError(RetagError):
    """Raised when a response body is not an image manifest (schema version 2)."""
