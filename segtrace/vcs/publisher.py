"""Publishing a rendered artifact to a repository host."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from segtrace.vcs.base import RepositoryHost

logger = logging.getLogger(__name__)


async def publish(
    files: Mapping[str, str | bytes],
    host: RepositoryHost,
    repository: str,
    message: str,
    description: str = "",
) -> str:
    """Push *files* (relative path -> text or bytes) to *repository*, creating it if needed.

    Returns the sha of the commit holding all files.
    """
    if not await host.repository_exists(repository):
        logger.info("creating repository %s", repository)
        await host.create_repository(repository, description=description)
    sha = await host.push_files(repository, files, message)
    logger.info("pushed %d files to %s (%s)", len(files), repository, sha)
    return sha
