"""Abstract interface to the service hosting generated repositories."""

from abc import ABC, abstractmethod
from collections.abc import Mapping


class RepositoryHostError(Exception):
    """Wraps hosting-service exceptions with context."""

    def __init__(self, operation: str, repository: str, cause: Exception) -> None:
        self.operation = operation
        self.repository = repository
        super().__init__(f"{operation} on {repository} failed: {cause}")
        self.__cause__ = cause


class RepositoryHost(ABC):
    """Abstract base class for repository hosting providers.

    The regeneration core never calls these itself; it hands a finished
    mapping of relative path -> rendered text to whoever drives publishing.
    """

    @abstractmethod
    async def repository_exists(self, name: str) -> bool:
        """Return True if the repository exists on the host."""
        ...

    @abstractmethod
    async def create_repository(self, name: str, description: str = "") -> None:
        """Create an empty repository with an initial default branch."""
        ...

    @abstractmethod
    async def delete_repository(self, name: str) -> None:
        """Delete a repository on the host."""
        ...

    @abstractmethod
    async def create_file(
        self, name: str, path: str, content: str | bytes, message: str
    ) -> None:
        """Create or overwrite a single file.

        Args:
            name: Repository name.
            path: File path within the repository.
            content: Text, or raw bytes for binary assets.
            message: Commit message, passed through unchanged.
        """
        ...

    @abstractmethod
    async def push_files(
        self, name: str, files: Mapping[str, str | bytes], message: str
    ) -> str:
        """Commit all *files* (path -> text or bytes) in one commit; return its sha."""
        ...

    @abstractmethod
    async def rename_file(self, name: str, old_path: str, new_path: str, message: str) -> None:
        """Move a file within the repository."""
        ...
