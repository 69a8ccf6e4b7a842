"""GitHub REST API client service.

Covers the two GitHub surfaces the service writes to:
- Contents API: the canonical compatibility.json (read + sha-conditioned write)
- Issues API: one discussion issue per game (list / create / comment / labels)
"""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://api.github.com"
ISSUES_PAGE_SIZE = 100


class GitHubAPIError(Exception):
    """Non-2xx response from the GitHub API."""

    def __init__(self, method: str, path: str, status_code: int, body: str):
        self.method = method
        self.path = path
        self.status_code = status_code
        self.body = body
        super().__init__(f"GitHub {method} {path} failed: {status_code} {body[:300]}")


class GitHubAPIClient:
    """Client for the GitHub REST API of one repository.

    Manages a shared httpx client for connection reuse.
    """

    API_VERSION = "2022-11-28"
    USER_AGENT = "xenios-compat-api"

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        *,
        base_url: str = GITHUB_API_BASE,
        http: httpx.AsyncClient | None = None,
    ):
        self.token = token
        self.owner = owner
        self.repo = repo
        self.base_url = base_url.rstrip("/")

        # Shared HTTP client, reuses TCP connections across requests
        self._http = http or httpx.AsyncClient(timeout=15.0)

    async def close(self) -> None:
        """Close the shared HTTP client. Call on app shutdown."""
        await self._http.aclose()

    @property
    def is_configured(self) -> bool:
        return bool(self.token)

    @property
    def repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    def issue_html_url(self, number: int) -> str:
        return f"https://github.com/{self.owner}/{self.repo}/issues/{number}"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "User-Agent": self.USER_AGENT,
            "X-GitHub-Api-Version": self.API_VERSION,
        }

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        response = await self._http.request(
            method,
            f"{self.base_url}{path}",
            params=params,
            json=json,
            headers=self._headers(),
        )
        if response.is_error:
            raise GitHubAPIError(method, path, response.status_code, response.text)
        if not response.content:
            return None
        return response.json()

    # ------------------------------------------------------------------
    # Contents API
    # ------------------------------------------------------------------

    async def get_contents(self, path: str, ref: str) -> dict[str, Any]:
        """GET a file; returns GitHub's content object (base64 ``content`` + ``sha``)."""
        return await self._request("GET", f"{self.repo_path}/contents/{path}", params={"ref": ref})

    async def get_blob(self, sha: str) -> dict[str, Any]:
        """GET a git blob. Used for files above the contents API inline limit."""
        return await self._request("GET", f"{self.repo_path}/git/blobs/{sha}")

    async def put_contents(
        self,
        path: str,
        *,
        content_b64: str,
        sha: str,
        message: str,
        branch: str,
    ) -> dict[str, Any]:
        """PUT a file, conditioned on ``sha`` being the current blob sha."""
        return await self._request(
            "PUT",
            f"{self.repo_path}/contents/{path}",
            json={"message": message, "content": content_b64, "sha": sha, "branch": branch},
        )

    # ------------------------------------------------------------------
    # Issues API
    # ------------------------------------------------------------------

    async def list_open_issues(self, label: str) -> list[dict[str, Any]]:
        """List every open issue carrying ``label`` (pull requests excluded).

        Reads the issues listing rather than the search index: search lags
        behind writes, and a thread created moments ago must be found.
        """
        issues: list[dict[str, Any]] = []
        page = 1
        while True:
            batch = await self._request(
                "GET",
                f"{self.repo_path}/issues",
                params={
                    "state": "open",
                    "labels": label,
                    "per_page": ISSUES_PAGE_SIZE,
                    "page": page,
                },
            )
            batch = batch or []
            issues.extend(item for item in batch if "pull_request" not in item)
            if len(batch) < ISSUES_PAGE_SIZE:
                return issues
            page += 1

    async def create_issue(self, title: str, body: str, labels: list[str]) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"{self.repo_path}/issues",
            json={"title": title, "body": body, "labels": labels},
        )

    async def create_comment(self, number: int, body: str) -> dict[str, Any]:
        return await self._request(
            "POST", f"{self.repo_path}/issues/{number}/comments", json={"body": body}
        )

    async def set_labels(self, number: int, labels: list[str]) -> None:
        """Replace the full label set of an issue."""
        await self._request("PATCH", f"{self.repo_path}/issues/{number}", json={"labels": labels})
