from typing import Any
from urllib.parse import quote
import httpx
from .base import GitPlatform


class GitHubClient(GitPlatform):
    PER_PAGE = 100

    def __init__(self, token: str, base_url: str = "https://api.github.com"):
        self.token = token
        self.api_url = base_url.rstrip("/")

    def _headers(self, accept: str = "application/vnd.github+json") -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": accept,
            "X-GitHub-Api-Version": "2022-11-28",
        }

    async def get_pr(self, owner: str, repo: str, pr_number: int) -> dict[str, Any]:
        async with httpx.AsyncClient() as client:
            response = await client.get(
                f"{self.api_url}/repos/{owner}/{repo}/pulls/{pr_number}",
                headers=self._headers(),
                timeout=30.0,
            )
            response.raise_for_status()
            return response.json()

    async def get_pr_files(self, owner: str, repo: str, pr_number: int) -> list[dict[str, Any]]:
        """List changed files with their patches, following pagination."""
        files: list[dict[str, Any]] = []
        page = 1
        async with httpx.AsyncClient() as client:
            while True:
                response = await client.get(
                    f"{self.api_url}/repos/{owner}/{repo}/pulls/{pr_number}/files",
                    params={"per_page": self.PER_PAGE, "page": page},
                    headers=self._headers(),
                    timeout=30.0,
                )
                response.raise_for_status()
                batch = response.json()
                files.extend(batch)
                if len(batch) < self.PER_PAGE:
                    return files
                page += 1

    async def get_file_content(self, owner: str, repo: str, file_path: str, ref: str) -> str:
        encoded_path = quote(file_path)
        async with httpx.AsyncClient() as client:
            response = await client.get(
                f"{self.api_url}/repos/{owner}/{repo}/contents/{encoded_path}",
                params={"ref": ref},
                headers=self._headers(accept="application/vnd.github.raw+json"),
                timeout=30.0,
            )
            response.raise_for_status()
            return response.text

    async def get_repo_config(self, owner: str, repo: str, ref: str) -> str | None:
        """Get .ai-companion.yaml content, returns None if not found."""
        try:
            return await self.get_file_content(owner, repo, ".ai-companion.yaml", ref)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise

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
        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{self.api_url}/repos/{owner}/{repo}/pulls/{pr_number}/comments",
                headers=self._headers(),
                json={
                    "body": comment,
                    "commit_id": commit_id,
                    "path": file_path,
                    "position": position,
                },
                timeout=30.0,
            )
            response.raise_for_status()

    async def post_review(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        body: str,
        event: str,
    ) -> None:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{self.api_url}/repos/{owner}/{repo}/pulls/{pr_number}/reviews",
                headers=self._headers(),
                json={"body": body, "event": event},
                timeout=30.0,
            )
            response.raise_for_status()
