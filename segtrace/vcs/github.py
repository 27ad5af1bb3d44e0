"""GitHub repository host using PyGithub."""

import asyncio
import base64
import os
from collections.abc import Mapping
from functools import cached_property

from github import Auth, Github, GithubException, InputGitTreeElement, UnknownObjectException
from github.Repository import Repository

from segtrace.vcs.base import RepositoryHost, RepositoryHostError


class GitHubHost(RepositoryHost):
    """GitHub implementation of RepositoryHost using PyGithub.

    PyGithub is synchronous, so all blocking calls are wrapped
    with asyncio.to_thread() to avoid blocking the event loop.
    """

    def __init__(
        self,
        token: str | None = None,
        organization: str = "",
        branch: str = "main",
    ):
        self._token = token or os.environ.get("GITHUB_TOKEN", "")
        if not self._token:
            raise ValueError(
                "GitHub token required. Pass token= or set GITHUB_TOKEN env var."
            )
        self.organization = organization
        self.branch = branch

    @cached_property
    def _client(self) -> Github:
        auth = Auth.Token(self._token)
        return Github(auth=auth)

    @cached_property
    def _owner(self) -> str:
        if self.organization:
            return self.organization
        return self._client.get_user().login

    def _get_repo(self, name: str) -> Repository:
        return self._client.get_repo(f"{self._owner}/{name}")

    @staticmethod
    def _tree_element(repo: Repository, path: str, data: str | bytes) -> InputGitTreeElement:
        """Text goes inline; bytes are uploaded as a base64 blob first."""
        if isinstance(data, bytes):
            blob = repo.create_git_blob(base64.b64encode(data).decode("ascii"), "base64")
            return InputGitTreeElement(path, "100644", "blob", sha=blob.sha)
        return InputGitTreeElement(path, "100644", "blob", content=data)

    async def repository_exists(self, name: str) -> bool:
        def _sync() -> bool:
            try:
                self._get_repo(name)
            except UnknownObjectException:
                return False
            except GithubException as e:
                raise RepositoryHostError("exists", name, e) from e
            return True

        return await asyncio.to_thread(_sync)

    async def create_repository(self, name: str, description: str = "") -> None:
        def _sync() -> None:
            try:
                if self.organization:
                    owner = self._client.get_organization(self.organization)
                else:
                    owner = self._client.get_user()
                owner.create_repo(name, description=description, auto_init=True)
            except GithubException as e:
                raise RepositoryHostError("create", name, e) from e

        await asyncio.to_thread(_sync)

    async def delete_repository(self, name: str) -> None:
        def _sync() -> None:
            try:
                self._get_repo(name).delete()
            except GithubException as e:
                raise RepositoryHostError("delete", name, e) from e

        await asyncio.to_thread(_sync)

    async def create_file(
        self, name: str, path: str, content: str | bytes, message: str
    ) -> None:
        def _sync() -> None:
            try:
                repo = self._get_repo(name)
                try:
                    existing = repo.get_contents(path, ref=self.branch)
                except UnknownObjectException:
                    repo.create_file(path, message, content, branch=self.branch)
                    return
                if isinstance(existing, list):
                    raise ValueError(f"Path '{path}' is a directory, not a file.")
                repo.update_file(path, message, content, existing.sha, branch=self.branch)
            except GithubException as e:
                raise RepositoryHostError("create_file", name, e) from e

        await asyncio.to_thread(_sync)

    async def push_files(
        self, name: str, files: Mapping[str, str | bytes], message: str
    ) -> str:
        def _sync() -> str:
            try:
                repo = self._get_repo(name)
                ref = repo.get_git_ref(f"heads/{self.branch}")
                parent = repo.get_git_commit(ref.object.sha)
                elements = [
                    self._tree_element(repo, path, data) for path, data in sorted(files.items())
                ]
                tree = repo.create_git_tree(elements, base_tree=parent.tree)
                commit = repo.create_git_commit(message, tree, [parent])
                ref.edit(commit.sha)
                return commit.sha
            except GithubException as e:
                raise RepositoryHostError("push", name, e) from e

        return await asyncio.to_thread(_sync)

    async def rename_file(self, name: str, old_path: str, new_path: str, message: str) -> None:
        def _sync() -> None:
            try:
                repo = self._get_repo(name)
                old = repo.get_contents(old_path, ref=self.branch)
                if isinstance(old, list):
                    raise ValueError(f"Path '{old_path}' is a directory, not a file.")
                repo.create_file(new_path, message, old.decoded_content, branch=self.branch)
                repo.delete_file(old_path, message, old.sha, branch=self.branch)
            except GithubException as e:
                raise RepositoryHostError("rename", name, e) from e

        await asyncio.to_thread(_sync)
