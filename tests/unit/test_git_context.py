"""
Unit tests for VOICEGIT git context service.

Local git tests run against a throwaway repository; GitHub tests run
against an in-process aiohttp server.
"""

import shutil
from unittest.mock import AsyncMock

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer as GitHubServer

from services.git.git_context import (
    GitHubClient,
    GitHubIssue,
    GitRepository,
    create_github_client,
    parse_repository_slug,
    truncate,
)
from voicegit.config import GitHubConfig
from voicegit.exceptions import DelegationError

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


class TestHelpers:
    """Tests for module helpers."""

    @pytest.mark.parametrize("url,slug", [
        ("https://github.com/octo/voicegit.git", "octo/voicegit"),
        ("https://github.com/octo/voicegit", "octo/voicegit"),
        ("git@github.com:octo/voicegit.git\n", "octo/voicegit"),
        ("ssh://git@github.com/octo/voicegit/", "octo/voicegit"),
        ("https://gitlab.com/octo/voicegit.git", None),
    ])
    def test_parse_repository_slug(self, url, slug):
        assert parse_repository_slug(url) == slug

    def test_truncate(self):
        assert truncate("abc", 5) == "abc"
        cut = truncate("abcdefgh", 5)
        assert cut.startswith("abcde")
        assert "truncated 3 characters" in cut

    def test_issue_prompt_line(self):
        assert GitHubIssue(12, "Crash on start", labels=["bug", "p1"]).to_prompt_line() == "#12 Crash on start [bug, p1]"
        assert GitHubIssue(3, "Docs").to_prompt_line() == "#3 Docs"


@requires_git
class TestGitRepository:
    """Tests for GitRepository against a real repository."""

    async def _init(self, path):
        repo = GitRepository(cwd=str(path))
        await repo.run("init", "-q")
        await repo.run("config", "user.email", "dev@example.com")
        await repo.run("config", "user.name", "Dev")
        await repo.run("config", "commit.gpgsign", "false")
        return repo

    @pytest.mark.asyncio
    async def test_staged_diff_and_commit(self, tmp_path):
        repo = await self._init(tmp_path)
        (tmp_path / "app.py").write_text("print('hi')\n")
        await repo.run("add", "app.py")

        diff = await repo.diff(cached=True)
        assert "app.py" in diff

        await repo.commit("Add app")
        assert "Add app" in await repo.recent_log(5)
        assert "print('hi')" in await repo.recent_diffs(1)
        assert (await repo.diff(cached=True)).strip() == ""

    @pytest.mark.asyncio
    async def test_zero_limits(self, tmp_path):
        repo = await self._init(tmp_path)
        assert await repo.recent_log(0) == ""
        assert await repo.recent_diffs(0) == ""
        assert await repo.release_notes(0) == ""

    @pytest.mark.asyncio
    async def test_failure_raises(self, tmp_path):
        repo = GitRepository(cwd=str(tmp_path))
        with pytest.raises(DelegationError, match="git log failed"):
            await repo.run("log")

    @pytest.mark.asyncio
    async def test_repository_slug(self, tmp_path):
        repo = await self._init(tmp_path)
        assert await repo.repository_slug() is None
        await repo.run("remote", "add", "origin", "git@github.com:octo/voicegit.git")
        assert await repo.repository_slug() == "octo/voicegit"


class TestGitExecutable:
    """Tests for a missing git executable."""

    @pytest.mark.asyncio
    async def test_missing_executable(self):
        with pytest.raises(DelegationError, match="git executable not found"):
            await GitRepository(executable="voicegit-no-such-git").run("status")


def _github_app(received):
    async def list_issues(request):
        received.append(("GET", dict(request.query), request.headers.get("Authorization")))
        return web.json_response([
            {"number": 5, "title": "Crash", "state": "open", "labels": [{"name": "bug"}],
             "html_url": "https://github.com/octo/app/issues/5"},
            {"number": 6, "title": "A pull request", "pull_request": {}},
            {"number": 7, "title": "Docs", "labels": []},
        ])

    async def create_issue(request):
        payload = await request.json()
        received.append(("POST", payload, request.headers.get("Authorization")))
        return web.json_response(
            {"number": 42, "title": payload["title"], "html_url": "https://github.com/octo/app/issues/42"},
            status=201,
        )

    async def missing(request):
        return web.json_response({"message": "Not Found"}, status=404)

    app = web.Application()
    app.router.add_get("/repos/octo/app/issues", list_issues)
    app.router.add_post("/repos/octo/app/issues", create_issue)
    app.router.add_get("/repos/octo/gone/issues", missing)
    return app


class TestGitHubClient:
    """Tests for GitHubClient class."""

    @pytest.mark.asyncio
    async def test_list_issues_excludes_pull_requests(self):
        received = []
        async with GitHubServer(_github_app(received)) as server:
            client = GitHubClient("octo/app", token="t0k", api_url=str(server.make_url("")))

            issues = await client.list_issues(10)

        assert [i.number for i in issues] == [5, 7]
        assert issues[0].labels == ["bug"]
        assert received[0][1]["state"] == "open"
        assert received[0][2] == "Bearer t0k"

    @pytest.mark.asyncio
    async def test_list_issues_limit(self):
        async with GitHubServer(_github_app([])) as server:
            client = GitHubClient("octo/app", api_url=str(server.make_url("")))
            assert len(await client.list_issues(1)) == 1
            assert await client.list_issues(0) == []

    @pytest.mark.asyncio
    async def test_create_issue(self):
        received = []
        async with GitHubServer(_github_app(received)) as server:
            client = GitHubClient("octo/app", token="t0k", api_url=str(server.make_url("")))

            issue = await client.create_issue("Review", "- finding", labels=["review"])

        assert issue.number == 42
        assert issue.url.endswith("/42")
        assert received[0][1] == {"title": "Review", "body": "- finding", "labels": ["review"]}

    @pytest.mark.asyncio
    async def test_create_issue_requires_token(self):
        with pytest.raises(DelegationError, match="token is required"):
            await GitHubClient("octo/app").create_issue("t", "b")

    @pytest.mark.asyncio
    async def test_http_error(self):
        async with GitHubServer(_github_app([])) as server:
            client = GitHubClient("octo/gone", api_url=str(server.make_url("")))
            with pytest.raises(DelegationError, match="404"):
                await client.list_issues(5)

    @pytest.mark.asyncio
    async def test_unreachable(self):
        client = GitHubClient("octo/app", api_url="http://127.0.0.1:9", timeout=2.0)
        with pytest.raises(DelegationError, match="unreachable"):
            await client.list_issues(5)


class TestCreateGitHubClient:
    """Tests for create_github_client function."""

    @pytest.mark.asyncio
    async def test_configured_repository(self):
        repo = AsyncMock(spec=GitRepository)
        client = await create_github_client(GitHubConfig(repository="octo/app", token="x"), repo)

        assert client.repository == "octo/app"
        assert client.token == "x"
        repo.repository_slug.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_from_remote(self):
        repo = AsyncMock(spec=GitRepository)
        repo.repository_slug.return_value = "octo/remote"

        client = await create_github_client(GitHubConfig(), repo)

        assert client.repository == "octo/remote"

    @pytest.mark.asyncio
    async def test_none_without_repository(self):
        repo = AsyncMock(spec=GitRepository)
        repo.repository_slug.return_value = None

        assert await create_github_client(GitHubConfig(), repo) is None
