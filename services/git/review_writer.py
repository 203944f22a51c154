"""
VOICEGIT Review Writer

Turns a review note (usually a spoken transcript) into a structured code
review. Optional sources give the model repository context: recent commit
history, recent diffs, release notes and open GitHub issues, each bounded
by its configured limit. With ``sendit`` the review is filed as a GitHub
issue.
"""

import logging
from typing import Any, List, Optional, Tuple

from services.git.git_context import GitHubClient, GitRepository, create_github_client
from voicegit.exceptions import DelegationError
from voicegit.llm_client import LLMClient, create_llm_client

logger = logging.getLogger("voicegit.services.git")

REVIEW_SYSTEM_PROMPT = """You are a senior engineer turning review notes into actionable issues.

Rules:
- Start with a one-line title prefixed by "# "
- Then list concrete findings, one per bullet, each with the affected area and a suggested fix
- Ground findings in the note and the repository context provided
- Do not invent files, functions or errors that are not mentioned
- Output markdown only"""


async def gather_context(
    options: Any,
    repo: GitRepository,
    github: Optional[GitHubClient],
) -> List[Tuple[str, str]]:
    """
    Collect the enabled context sources as (heading, text) pairs.

    Sources that fail are logged and skipped.
    """
    sections: List[Tuple[str, str]] = []

    async def add(heading: str, fetch):
        try:
            text = await fetch()
        except DelegationError as e:
            logger.warning(f"Skipping {heading.lower()}: {e}")
            return
        if text and text.strip():
            sections.append((heading, text.strip()))

    if options.include_commit_history:
        await add("Recent commits", lambda: repo.recent_log(options.commit_history_limit))
    if options.include_recent_diffs:
        await add("Recent diffs", lambda: repo.recent_diffs(options.diff_history_limit))
    if options.include_release_notes:
        await add("Release notes", lambda: repo.release_notes(options.release_notes_limit))
    if options.include_github_issues:
        if github is None:
            logger.warning("Skipping GitHub issues: no GitHub repository configured")
        else:
            async def issues() -> str:
                found = await github.list_issues(options.github_issues_limit)
                return "\n".join(issue.to_prompt_line() for issue in found)
            await add("Open GitHub issues", issues)

    return sections


def build_review_prompt(
    note: Optional[str],
    context: Optional[str] = None,
    sections: Optional[List[Tuple[str, str]]] = None,
) -> str:
    """Assemble the user prompt for review generation."""
    parts = [f"Review note:\n{note or '(no note given; review the recent changes)'}"]
    if context:
        parts.append(f"Additional context:\n{context}")
    for heading, text in sections or []:
        parts.append(f"{heading}:\n{text}")
    return "\n\n".join(parts)


def split_title(review_text: str) -> Tuple[str, str]:
    """Split generated markdown into an issue title and body."""
    lines = review_text.strip().splitlines()
    if not lines:
        return "Code review", ""
    title = lines[0].lstrip("#").strip() or "Code review"
    return title[:120], "\n".join(lines[1:]).strip()


async def review(
    config: Any,
    llm_client: Optional[LLMClient] = None,
    repo: Optional[GitRepository] = None,
    github: Optional[GitHubClient] = None,
) -> str:
    """
    Generate (and optionally file) a code review.

    Args:
        config: VoicegitConfig; reads ``review``, ``llm``, ``github`` and ``dry_run``
        llm_client: Client to generate with (built from ``config.llm`` if None)
        repo: Repository to read context from (current directory if None)
        github: GitHub client (built from ``config.github`` when needed)

    Returns:
        The review text, followed by the filed issue link when ``sendit``
        created one

    Raises:
        DelegationError: Generation or issue creation failed
    """
    options = config.review
    repo = repo or GitRepository()
    client = llm_client or create_llm_client(config.llm)

    if github is None and (options.include_github_issues or options.sendit):
        github = await create_github_client(config.github, repo)

    sections = await gather_context(options, repo, github)
    prompt = build_review_prompt(options.note, options.context, sections)
    response = await client.complete(prompt, system_prompt=REVIEW_SYSTEM_PROMPT)
    review_text = response.content.strip()
    if not review_text:
        raise DelegationError("Generated review was empty", command="review")

    if not options.sendit:
        return review_text

    if config.dry_run:
        logger.info("DRY RUN: Would file review as a GitHub issue")
        return review_text
    if github is None:
        raise DelegationError("Cannot file review: no GitHub repository configured", command="review")

    title, body = split_title(review_text)
    issue = await github.create_issue(title, body or review_text)
    return f"{review_text}\n\nFiled GitHub issue #{issue.number}: {issue.url}"
