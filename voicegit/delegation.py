"""
VOICEGIT Delegation Adapter

Maps the audio command options onto the downstream commit/review option
blocks, injects the transcript, and invokes the downstream command. The
incoming configuration is never mutated; a derived copy is handed on.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from pydantic import BaseModel

from voicegit.config import VoicegitConfig
from voicegit.exceptions import DelegationError, VoicegitError
from voicegit.logging_config import get_logger
from voicegit.types import TextCommand

__all__ = [
    "COMMIT_MAPPED_FIELDS",
    "REVIEW_MAPPED_FIELDS",
    "DelegationAdapter",
    "map_fields",
]

# audio_commit -> commit
COMMIT_MAPPED_FIELDS: Tuple[str, ...] = ("sendit", "context")

# audio_review -> review
REVIEW_MAPPED_FIELDS: Tuple[str, ...] = (
    "include_commit_history",
    "include_recent_diffs",
    "include_release_notes",
    "include_github_issues",
    "commit_history_limit",
    "diff_history_limit",
    "release_notes_limit",
    "github_issues_limit",
    "sendit",
    "context",
)


def map_fields(source: BaseModel, fields: Tuple[str, ...]) -> dict:
    """Collect the listed fields that are set (not None) on ``source``."""
    mapped = {}
    for name in fields:
        value = getattr(source, name, None)
        if value is not None:
            mapped[name] = value
    return mapped


def _choose_text(transcript: Optional[str], existing: Optional[str]) -> str:
    if transcript and transcript.strip():
        return transcript.strip()
    return existing or ""


class DelegationAdapter:
    """
    Hands a transcript to the commit or review generator.

    Usage:
        adapter = DelegationAdapter(commit=commit, review=review)
        message = await adapter.delegate_commit(config, "fix the login race")
    """

    def __init__(
        self,
        commit: TextCommand,
        review: TextCommand,
        logger: Optional[logging.Logger | logging.LoggerAdapter] = None,
    ):
        self.commit = commit
        self.review = review
        self.logger = logger or get_logger(__name__)

    def commit_config(self, config: VoicegitConfig, transcript: Optional[str]) -> VoicegitConfig:
        """Derive the configuration handed to the commit generator."""
        update = map_fields(config.audio_commit, COMMIT_MAPPED_FIELDS)
        update["direction"] = _choose_text(transcript, config.commit.direction)
        return config.model_copy(update={"commit": config.commit.model_copy(update=update)})

    def review_config(
        self,
        config: VoicegitConfig,
        transcript: Optional[str],
        note_override: Optional[str] = None,
    ) -> VoicegitConfig:
        """Derive the configuration handed to the review generator.

        ``note_override`` replaces the note verbatim (used by batch mode to
        label the note with the source file).
        """
        update = map_fields(config.audio_review, REVIEW_MAPPED_FIELDS)
        if note_override is not None:
            update["note"] = note_override
        else:
            update["note"] = _choose_text(transcript, config.review.note)
        return config.model_copy(update={"review": config.review.model_copy(update=update)})

    async def delegate_commit(self, config: VoicegitConfig, transcript: Optional[str]) -> str:
        """Run the commit generator with ``transcript`` as its direction."""
        derived = self.commit_config(config, transcript)
        self.logger.info(
            "AUDIO_COMMIT_DELEGATING: Generating commit message | Audio context: %s",
            "yes" if derived.commit.direction else "no",
        )
        return await self._invoke(self.commit, derived, "commit")

    async def delegate_review(
        self,
        config: VoicegitConfig,
        transcript: Optional[str],
        note_override: Optional[str] = None,
    ) -> str:
        """Run the review generator with ``transcript`` as its note."""
        derived = self.review_config(config, transcript, note_override)
        self.logger.info(
            "AUDIO_REVIEW_DELEGATING: Generating review | Audio context: %s",
            "yes" if derived.review.note else "no",
        )
        return await self._invoke(self.review, derived, "review")

    async def _invoke(self, command: TextCommand, config: VoicegitConfig, name: str) -> str:
        try:
            return await command(config)
        except VoicegitError:
            raise
        except Exception as e:
            raise DelegationError(f"{name.capitalize()} generation failed: {e}", command=name) from e
