"""
VOICEGIT Git Context Service

Collects the repository context the commit and review generators put in
their prompts, and performs the few write operations they need.

Local data comes from the ``git`` executable run as an async subprocess.
GitHub issues are read and created through the REST API with aiohttp.
"""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import aiohttp

from voicegit.exceptions import DelegationError

logger = logging.getLogger("voicegit.services.git")

# Diffs beyond this size are truncated before they reach a prompt
MAX_DIFF_CHARS = 60_000

_REMOTE_PATTERN = re.compile(r"github\.com[:/](?P<slug>[^/\s]+/[^/\s]+?)(?:\.git)?/?$")


@dataclass
class GitHubIssue:
    """Summary of a GitHub issue."""
    number: int
    title: str
    state: str = "open"
    labels: List[str] = field(default_factory=list)
    url: str = ""

    def to_prompt_line(self) -> str:
        labels = f" [{', '.join(self.labels)}]" if self.labels else ""
        return f"#{self.number} {self.title}{labels}"


def truncate(text: str, limit: int = MAX_DIFF_CHARS) -> str:
    """Cut ``text`` to ``limit`` characters, marking the cut."""
    if len(text) <= limit:
        return text
    return text[:limit] + f"\n... [truncated {len(text) - limit} characters]"


def parse_repository_slug(remote_url: str) -> Optional[str]:
    """Extract ``owner/name`` from a GitHub remote URL (https or ssh)."""
    match = _REMOTE_PATTERN.search(remote_url.strip())
    return match.group("slug") if match else None


class GitRepository:
    """
    Async access to a local git working tree.

    Usage:
        repo = GitRepository()
        diff = await repo.diff(cached=True)
    """

    def __init__(self, cwd: Optional[str] = None, executable: str = "git"):
        self.cwd = cwd
        self.executable = executable

    async def run(self, *args: str) -> str:
        """
        Run a git command and return its stdout.

        Raises:
            DelegationError: If git is missing or exits non-zero
        """
        try:
            process = await asyncio.create_subprocess_exec(
                self.executable,
                *args,
                cwd=self.cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            raise DelegationError("git executable not found", command="git")

        stdout, stderr = await process.communicate()
        if process.returncode != 0:
            message = stderr.decode(errors="replace").strip()
            raise DelegationError(f"git {args[0]} failed: {message}", command="git")
        return stdout.decode(errors="replace")

    async def diff(self, cached: bool = True) -> str:
        """Staged diff (or working tree diff when ``cached`` is False)."""
        args = ["diff", "--cached"] if cached else ["diff"]
        return truncate(await self.run(*args))

    async def recent_log(self, limit: int) -> str:
        """One-line summaries of the last ``limit`` commits."""
        if limit <= 0:
            return ""
        return await self.run("log", f"-n{limit}", "--pretty=format:%h %s (%an, %ar)")

    async def recent_diffs(self, limit: int) -> str:
        """Patches of the last ``limit`` commits."""
        if limit <= 0:
            return ""
        return truncate(await self.run("log", f"-n{limit}", "-p", "--pretty=format:commit %h %s"))

    async def release_notes(self, limit: int) -> str:
        """Annotation messages of the ``limit`` most recent tags."""
        if limit <= 0:
            return ""
        return await self.run(
            "for-each-ref",
            "--sort=-creatordate",
            f"--count={limit}",
            "--format=## %(refname:short)%0a%(contents)",
            "refs/tags",
        )

    async def commit(self, message: str) -> str:
        """Commit staged changes with ``message``."""
        return await self.run("commit", "-m", message)

    async def repository_slug(self, remote: str = "origin") -> Optional[str]:
        """``owner/name`` of the GitHub remote, if there is one."""
        try:
            url = await self.run("remote", "get-url", remote)
        except DelegationError as e:
            logger.debug(f"No remote {remote}: {e}")
            return None
        return parse_repository_slug(url)


class GitHubClient:
    """Minimal GitHub REST client for issues."""

    def __init__(
        self,
        repository: str,
        token: Optional[str] = None,
        api_url: str = "https://api.github.com",
        timeout: float = 15.0,
    ):
        self.repository = repository
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "voicegit",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.api_url}/repos/{self.repository}{path}"
        try:
            async with aiohttp.ClientSession(headers=self._headers()) as session:
                async with session.request(
                    method,
                    url,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                    **kwargs,
                ) as response:
                    if response.status >= 400:
                        body = await response.text()
                        raise DelegationError(
                            f"GitHub API {method} {path} failed: {response.status} {body[:200]}",
                            command="github",
                        )
                    return await response.json()
        except aiohttp.ClientError as e:
            raise DelegationError(f"GitHub API unreachable: {e}", command="github")

    async def list_issues(self, limit: int) -> List[GitHubIssue]:
        """Open issues, most recently updated first (pull requests excluded)."""
        if limit <= 0:
            return []
        data = await self._request(
            "GET",
            "/issues",
            params={"state": "open", "sort": "updated", "per_page": str(min(limit, 100))},
        )
        issues = []
        for item in data:
            if "pull_request" in item:
                continue
            issues.append(GitHubIssue(
                number=item["number"],
                title=item.get("title", ""),
                state=item.get("state", "open"),
                labels=[label.get("name", "") for label in item.get("labels", [])],
                url=item.get("html_url", ""),
            ))
        return issues[:limit]

    async def create_issue(self, title: str, body: str, labels: Optional[List[str]] = None) -> GitHubIssue:
        """File a new issue and return it."""
        if not self.token:
            raise DelegationError("A GitHub token is required to create issues", command="github")
        payload: Dict[str, Any] = {"title": title, "body": body}
        if labels:
            payload["labels"] = labels
        item = await self._request("POST", "/issues", json=payload)
        issue = GitHubIssue(
            number=item["number"],
            title=item.get("title", title),
            url=item.get("html_url", ""),
        )
        logger.info(f"Created GitHub issue #{issue.number}: {issue.url}")
        return issue


async def create_github_client(config: Any, repo: GitRepository) -> Optional[GitHubClient]:
    """
    Build a GitHubClient from a ``GitHubConfig``.

    The repository comes from the config, or else the ``origin`` remote.
    Returns None when no GitHub repository can be determined.
    """
    repository = config.repository or await repo.repository_slug()
    if not repository:
        return None
    return GitHubClient(repository, token=config.token, api_url=config.api_url)
