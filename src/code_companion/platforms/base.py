from abc import ABC, abstractmethod
from typing import Any


class GitPlatform(ABC):
    @abstractmethod
    async def get_pr(self, owner: str, repo: str, pr_number: int) -> dict[str, Any]:
        pass

    @abstractmethod
    async def get_pr_files(self, owner: str, repo: str, pr_number: int) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    async def get_file_content(self, owner: str, repo: str, file_path: str, ref: str) -> str:
        pass

    @abstractmethod
    async def get_repo_config(self, owner: str, repo: str, ref: str) -> str | None:
        """Raw repository config file, or None when the repository has none."""
        pass

    @abstractmethod
    async def post_review_comment(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        commit_id: str,
        file_path: str,
        position: int,
        comment: str,
    ) -> None:
        pass

    @abstractmethod
    async def post_review(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        body: str,
        event: str,
    ) -> None:
        pass
