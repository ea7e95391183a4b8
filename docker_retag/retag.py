#!/usr/bin/env python

"""Publishes an existing manifest under new references."""

import asyncio
import logging

from typing import Iterable, List, Union

from .errors import RetagError
from .imagereference import ImageReference
from .registryclient import RegistryClient
from .typing import RetagResult, UploadJob, UploadOutcome

LOGGER = logging.getLogger(__name__)

MAX_WORKERS = 10


def _to_reference(reference: Union[ImageReference, str]) -> ImageReference:
    if isinstance(reference, ImageReference):
        return reference
    return ImageReference.parse(reference)


async def upload_worker(
    client: RegistryClient, jobs: asyncio.Queue, results: asyncio.Queue
):
    """
    Publishes manifests until the job queue is exhausted, reporting one outcome per job.

    Args:
        client: The registry client used to publish manifests.
        jobs: Fully populated queue of UploadJob.
        results: Queue to which each UploadOutcome is reported.
    """
    while True:
        try:
            job = jobs.get_nowait()  # type: UploadJob
        except asyncio.QueueEmpty:
            return
        try:
            response = await client.put_manifest(job.reference, job.manifest)
            outcome = UploadOutcome(reference=job.reference, digest=response.digest)
        except RetagError as exception:
            outcome = UploadOutcome(reference=job.reference, error=exception)
        except Exception as exception:  # pylint: disable=broad-except
            LOGGER.exception("Unexpected error publishing: %s", job.reference)
            outcome = UploadOutcome(reference=job.reference, error=exception)
        finally:
            jobs.task_done()
        await results.put(outcome)


async def retag(
    source: Union[ImageReference, str],
    targets: Iterable[Union[ImageReference, str]],
    *,
    client: RegistryClient,
) -> RetagResult:
    """
    Retrieves the manifest of a source image and publishes it under each target reference.

    Args:
        source: The image reference from which to retrieve the manifest.
        targets: The image references to which the manifest is published.
    Keyword Args:
        client: The registry client used to retrieve and publish manifests.

    Returns:
        dict:
            manifest: The retrieved manifest.
            outcomes: One UploadOutcome per target, in order of completion.
            result: True if every target was published, False otherwise.
            error: The first failure collected, or None.
    """
    source = _to_reference(source)
    targets = [_to_reference(target) for target in targets]

    # A failure to retrieve the source manifest propagates before anything is published ...
    LOGGER.debug("Retrieving manifest: %s", source)
    manifest = (await client.get_manifest(source)).manifest

    jobs = asyncio.Queue()
    results = asyncio.Queue()
    for target in targets:
        jobs.put_nowait(UploadJob(manifest=manifest, reference=target))

    workers = min(MAX_WORKERS, len(targets))
    LOGGER.debug("Publishing %d reference(s) using %d worker(s)", len(targets), workers)
    tasks = [
        asyncio.ensure_future(upload_worker(client, jobs, results))
        for _ in range(workers)
    ]

    outcomes = []  # type: List[UploadOutcome]
    error = None
    for _ in range(len(targets)):
        outcome = await results.get()  # type: UploadOutcome
        if outcome.error is not None:
            LOGGER.error("Unable to publish %s: %s", outcome.reference, outcome.error)
            if error is None:
                error = outcome.error
        else:
            LOGGER.info("Published %s (%s)", outcome.reference, outcome.digest)
        outcomes.append(outcome)
    await asyncio.gather(*tasks)

    return RetagResult(
        manifest=manifest,
        outcomes=tuple(outcomes),
        result=error is None,
        error=error,
    )
