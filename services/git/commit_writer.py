"""
VOICEGIT Commit Writer

Generates a commit message for the staged changes. The spoken direction
(the transcript) and any extra context steer the message; with ``sendit``
the message is committed straight away.
"""

import logging
from typing import Any, Optional

from services.git.git_context import GitRepository
from voicegit.exceptions import DelegationError
from voicegit.llm_client import LLMClient, create_llm_client

logger = logging.getLogger("voicegit.services.git")

COMMIT_SYSTEM_PROMPT = """You write git commit messages.

Rules:
- First line: imperative summary, at most 72 characters, no trailing period
- Blank line, then a short body explaining what changed and why, wrapped at 72 columns
- Describe only changes present in the diff
- When the author gives a direction, follow it; it reflects their intent
- Output the commit message only, without code fences or commentary"""


def build_commit_prompt(diff: str, direction: Optional[str] = None, context: Optional[str] = None) -> str:
    """Assemble the user prompt for commit generation."""
    parts = []
    if direction:
        parts.append(f"Author's direction:\n{direction}")
    if context:
        parts.append(f"Additional context:\n{context}")
    parts.append(f"Diff:\n{diff}")
    return "\n\n".join(parts)


def clean_message(text: str) -> str:
    """Strip surrounding whitespace and code fences from model output."""
    lines = text.strip().splitlines()
    if lines and lines[0].startswith("```"):
        lines = lines[1:]
    if lines and lines[-1].startswith("```"):
        lines = lines[:-1]
    return "\n".join(lines).strip()


async def commit(
    config: Any,
    llm_client: Optional[LLMClient] = None,
    repo: Optional[GitRepository] = None,
) -> str:
    """
    Generate (and optionally create) a commit message.

    Args:
        config: VoicegitConfig; reads ``commit``, ``llm`` and ``dry_run``
        llm_client: Client to generate with (built from ``config.llm`` if None)
        repo: Repository to read and commit to (current directory if None)

    Returns:
        The generated commit message

    Raises:
        DelegationError: No staged changes, git failure, or generation failure
    """
    options = config.commit
    repo = repo or GitRepository()
    client = llm_client or create_llm_client(config.llm)

    diff = await repo.diff(cached=options.cached is not False)
    if not diff.strip():
        raise DelegationError("No staged changes found. Stage files with 'git add' first.", command="commit")

    prompt = build_commit_prompt(diff, options.direction, options.context)
    response = await client.complete(prompt, system_prompt=COMMIT_SYSTEM_PROMPT)
    message = clean_message(response.content)
    if not message:
        raise DelegationError("Generated commit message was empty", command="commit")

    if options.sendit:
        if config.dry_run:
            logger.info("DRY RUN: Would commit with generated message")
        else:
            await repo.commit(message)
            logger.info("COMMIT_CREATED: Committed staged changes | Summary: %s", message.splitlines()[0])

    return message
