"""
VOICEGIT Git Service

Repository context, commit message generation and review generation.
"""

from .commit_writer import commit
from .git_context import GitHubClient, GitHubIssue, GitRepository, create_github_client
from .review_writer import review

__all__ = [
    "GitHubClient",
    "GitHubIssue",
    "GitRepository",
    "commit",
    "create_github_client",
    "review",
]
