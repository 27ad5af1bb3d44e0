"""Repository hosting collaborator for publishing generated artifacts."""

import os

from segtrace.config.models import VCSConfig
from segtrace.vcs.base import RepositoryHost, RepositoryHostError
from segtrace.vcs.github import GitHubHost
from segtrace.vcs.publisher import publish


def create_host(config: VCSConfig) -> RepositoryHost:
    """Create a repository host from config.

    Resolves the token from the environment variable named in config.token_env.
    """
    if config.provider != "github":
        raise ValueError(
            f"Unsupported VCS provider: {config.provider!r}. "
            "Currently only 'github' is supported."
        )
    token = os.environ.get(config.token_env, "")
    if not token:
        raise ValueError(
            f"VCS token not found. Set the {config.token_env} environment variable."
        )
    return GitHubHost(
        token=token,
        organization=config.organization,
        branch=config.default_branch,
    )


__all__ = [
    "GitHubHost",
    "RepositoryHost",
    "RepositoryHostError",
    "create_host",
    "publish",
]
