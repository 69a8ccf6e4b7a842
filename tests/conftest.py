"""
Pytest fixtures for the compatibility API tests

GitHub and Discord are replaced by in-memory fakes mounted on
httpx.MockTransport, so the real API clients are exercised end to end.
"""

import base64
import hashlib
import json
import re
from datetime import date

import httpx
import pytest

from compat_api.core.config import Settings
from compat_api.services import (
    DiscordAPIClient,
    GitHubAPIClient,
    IssueService,
    NotificationService,
    ReportService,
)
from compat_shared.cache import SessionCache
from compat_shared.repositories import CompatibilityRepository
from compat_shared.validation import validate_report

COMPAT_PATH = "data/compatibility.json"
WEBHOOK_URL = "https://discord.test/api/webhooks/111/hooktoken"

_ISSUE_RE = re.compile(r"/issues/(\d+)$")
_COMMENT_RE = re.compile(r"/issues/(\d+)/comments$")


def _sha(text: str) -> str:
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


class FakeGitHub:
    """Just enough of the contents + issues API for one repository."""

    def __init__(self, games: list | None = None):
        self.content = json.dumps(games or [], indent=2) + "\n"
        self.sha = _sha(self.content)
        self.commits: list[str] = []
        self.issues: list[dict] = []
        self.comments: list[tuple[int, str]] = []
        self.label_updates: list[tuple[int, list[str]]] = []
        self.requests: list[httpx.Request] = []
        self.fail_reads = False
        self.fail_issues = False
        self.inline_limit: int | None = None

    @property
    def games(self) -> list:
        return json.loads(self.content)

    def add_issue(self, title: str, labels: list[str], state: str = "open") -> dict:
        number = len(self.issues) + 1
        issue = {
            "number": number,
            "title": title,
            "state": state,
            "labels": [{"name": name} for name in labels],
            "html_url": f"https://github.com/xenios-jp/xenios.jp/issues/{number}",
        }
        self.issues.append(issue)
        return issue

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        method = request.method

        if path.endswith(f"/contents/{COMPAT_PATH}"):
            if self.fail_reads:
                return httpx.Response(500, json={"message": "Server Error"})
            if method == "GET":
                encoded = base64.b64encode(self.content.encode("utf-8")).decode("ascii")
                if self.inline_limit is not None and len(self.content) > self.inline_limit:
                    return httpx.Response(
                        200, json={"sha": self.sha, "content": "", "encoding": "none"}
                    )
                return httpx.Response(
                    200, json={"sha": self.sha, "content": encoded, "encoding": "base64"}
                )
            if method == "PUT":
                body = json.loads(request.content)
                if body.get("sha") != self.sha:
                    return httpx.Response(
                        409, json={"message": f"{COMPAT_PATH} does not match {body.get('sha')}"}
                    )
                self.content = base64.b64decode(body["content"]).decode("utf-8")
                self.sha = _sha(self.content)
                self.commits.append(body["message"])
                return httpx.Response(200, json={"content": {"sha": self.sha}})

        if "/git/blobs/" in path and method == "GET":
            encoded = base64.b64encode(self.content.encode("utf-8")).decode("ascii")
            return httpx.Response(200, json={"sha": self.sha, "content": encoded})

        if self.fail_issues and "/issues" in path:
            return httpx.Response(502, json={"message": "Bad Gateway"})

        if path.endswith("/issues") and method == "GET":
            label = request.url.params.get("labels")
            page = int(request.url.params.get("page", "1"))
            per_page = int(request.url.params.get("per_page", "30"))
            matching = [
                i
                for i in self.issues
                if i["state"] == "open" and any(lbl["name"] == label for lbl in i["labels"])
            ]
            start = (page - 1) * per_page
            return httpx.Response(200, json=matching[start : start + per_page])

        if path.endswith("/issues") and method == "POST":
            body = json.loads(request.content)
            issue = self.add_issue(body["title"], body["labels"])
            issue["body"] = body["body"]
            return httpx.Response(201, json=issue)

        match = _COMMENT_RE.search(path)
        if match and method == "POST":
            number = int(match.group(1))
            self.comments.append((number, json.loads(request.content)["body"]))
            return httpx.Response(201, json={"id": len(self.comments)})

        match = _ISSUE_RE.search(path)
        if match and method == "PATCH":
            number = int(match.group(1))
            labels = json.loads(request.content)["labels"]
            self.label_updates.append((number, labels))
            self.issues[number - 1]["labels"] = [{"name": name} for name in labels]
            return httpx.Response(200, json=self.issues[number - 1])

        return httpx.Response(404, json={"message": "Not Found"})


class FakeDiscord:
    """Records webhook posts, webhook edits and interaction follow-ups."""

    def __init__(self):
        self.posts: list[dict] = []
        self.edits: list[tuple[str, dict]] = []
        self.followups: list[tuple[str, dict]] = []
        self.fail = False
        self._next_id = 900

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.fail:
            return httpx.Response(500, json={"message": "boom"})
        path = request.url.path
        body = json.loads(request.content) if request.content else {}

        if "/messages/@original" in path:
            token = path.split("/")[-3]
            self.followups.append((token, body))
            return httpx.Response(200, json={"id": "1"})
        if "/messages/" in path and request.method == "PATCH":
            self.edits.append((path.rsplit("/", 1)[-1], body))
            return httpx.Response(200, json={"id": path.rsplit("/", 1)[-1]})
        if request.method == "POST":
            self.posts.append(body)
            if request.url.params.get("wait") == "true":
                self._next_id += 1
                return httpx.Response(200, json={"id": str(self._next_id)})
            return httpx.Response(204)
        return httpx.Response(404)


@pytest.fixture
def today():
    return date(2026, 10, 19)


@pytest.fixture
def halo_body():
    """Report body from the Halo 3 scenario"""
    return {
        "titleId": "4D5307E6",
        "title": "Halo 3",
        "status": "playable",
        "perf": "great",
        "platform": "ios",
        "device": "iPhone 15 Pro",
        "osVersion": "17.2",
        "arch": "arm64",
        "gpuBackend": "msl",
        "notes": "Runs full speed.",
    }


@pytest.fixture
def make_report(halo_body, today):
    """Build a validated ReportPayload from overrides of the Halo 3 body"""

    def _make(source="app", **overrides):
        result = validate_report({**halo_body, **overrides}, source=source, today=today)
        assert result.ok, result.error
        return result.report

    return _make


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        github_token="gh-token",
        api_key="secret-key",
        discord_webhook=WEBHOOK_URL,
        discord_application_id="app-123",
        discord_public_key="",
        site_url="https://xenios.jp",
        environment="test",
    )


@pytest.fixture
def fake_github():
    return FakeGitHub()


@pytest.fixture
def fake_discord():
    return FakeDiscord()


@pytest.fixture
def github_api(fake_github):
    return GitHubAPIClient(
        token="gh-token",
        owner="xenios-jp",
        repo="xenios.jp",
        http=httpx.AsyncClient(transport=httpx.MockTransport(fake_github.handler)),
    )


@pytest.fixture
def discord_api(fake_discord):
    return DiscordAPIClient(
        webhook_url=WEBHOOK_URL,
        application_id="app-123",
        http=httpx.AsyncClient(transport=httpx.MockTransport(fake_discord.handler)),
    )


@pytest.fixture
def repository(github_api):
    return CompatibilityRepository(github_api, path=COMPAT_PATH, branch="main")


@pytest.fixture
def notifications(discord_api):
    return NotificationService(discord_api, site_url="https://xenios.jp")


@pytest.fixture
def report_service(repository, github_api, notifications):
    return ReportService(
        repository=repository,
        issues=IssueService(github_api),
        notifications=notifications,
    )


@pytest.fixture
def sessions():
    return SessionCache(maxsize=16, ttl=600)
