#!/usr/bin/env python

"""Class that provides parsing and formatting of docker image references."""

from .specs import Indices
from .typing import ImageReferenceParseString


class ImageReference:
    """
    Docker image reference abstraction: registry endpoint, repository and tag.
    """

    DEFAULT_ENDPOINT = Indices.DOCKERHUB
    DEFAULT_TAG = "latest"

    def __init__(self, repository: str, *, endpoint: str = None, tag: str = None):
        """
        Args:
            repository: Repository path of the image, including any namespaces.
        Keyword Args:
            endpoint: Registry endpoint address (<hostname>[:<port>]).
            tag: Tag name.
        """
        if not repository:
            raise ValueError("Repository must not be empty")
        self.endpoint = endpoint if endpoint else ImageReference.DEFAULT_ENDPOINT
        self.repository = repository
        self.tag = tag if tag else ImageReference.DEFAULT_TAG

    def __eq__(self, other):
        return str(self) == str(other)

    def __lt__(self, other):
        return str(self) < str(other)

    def __hash__(self):
        """Hash according to our string value"""
        return hash(str(self))

    def __repr__(self):
        return f"ImageReference({str(self)!r})"

    def __str__(self):
        return f"{self.endpoint}/{self.repository}:{self.tag}"

    @staticmethod
    def _parse_string(string: str) -> ImageReferenceParseString:
        """
        Parses the endpoint, repository, and tag from a given string.

        Note: No validation is performed beyond requiring a repository; malformed
              references (i.e. "image:a:b") are split on the last ':'. An empty tag
              (i.e. "image:") is returned as None, and resolves to DEFAULT_TAG.

        Args:
            string: The string to be parsed.

        Returns:
            dict:
                endpoint: The registry endpoint; address with optional port.
                repository: The repository path.
                tag: The tag name.
        """
        endpoint = None
        tag = None

        # host[:port]/repository[:tag] OR repository[:tag]
        if "/" in string:
            endpoint, remainder = string.split("/", 1)
        else:
            remainder = string

        repository, separator, suffix = remainder.rpartition(":")
        if separator:
            tag = suffix or None
        else:
            repository = remainder

        if not repository:
            raise ValueError(f"Unable to parse string: {string}")

        return ImageReferenceParseString(
            endpoint=endpoint, repository=repository, tag=tag
        )

    @staticmethod
    def parse(image_reference: str) -> "ImageReference":
        """
        Initializes an ImageReference from a given image reference string.

        Args:
            image_reference: String containing the image reference to be parsed.

        Returns:
            The newly initialized object.
        """
        parsed = ImageReference._parse_string(image_reference)
        return ImageReference(
            parsed.repository, endpoint=parsed.endpoint, tag=parsed.tag
        )

    def get_url(self, protocol: str) -> str:
        """
        Builds the manifest URL for this reference.

        Args:
            protocol: Protocol to use when connecting to the endpoint.

        Returns:
            The manifest URL.
        """
        return f"{protocol}://{self.endpoint}/v2/{self.repository}/manifests/{self.tag}"
