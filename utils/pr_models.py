#!/usr/bin/env python3
"""Pydantic models for the pull request a run reports on.

The pull request is read from the workflow event payload (the JSON file the
runner points GITHUB_EVENT_PATH at) or given explicitly on the command line.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError

from configs.config import ConfigError

logger = logging.getLogger(__name__)


class PullRequestRef(BaseModel):
    """Identifies the pull request to comment on and the branch to measure."""

    owner: str = Field(..., min_length=1, description="Repository owner login")
    repo: str = Field(..., min_length=1, description="Repository name")
    number: int = Field(..., gt=0, description="Pull request number")
    head_ref: str = Field(..., min_length=1, description="Pull request head branch")

    model_config = {"extra": "ignore"}

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    def __str__(self) -> str:
        return f"{self.full_name}#{self.number}"


def safe_extract(data: Dict, *keys, default=None):
    """Safely extract nested dictionary values.

    Example:
        safe_extract(payload, "pull_request", "head", "ref")
    """
    current = data
    for key in keys:
        if not isinstance(current, dict) or key not in current:
            return default
        current = current[key]
    return current


def pull_request_from_payload(payload: Dict[str, Any]) -> Optional[PullRequestRef]:
    """Build a PullRequestRef from a webhook payload.

    Returns:
        None when the payload is not a pull request event

    Raises:
        ConfigError: If it is a pull request event but fields are missing
    """
    if not payload.get("repository") or not payload.get("pull_request"):
        return None
    try:
        return PullRequestRef(
            owner=safe_extract(payload, "repository", "owner", "login", default=""),
            repo=safe_extract(payload, "repository", "name", default=""),
            number=safe_extract(payload, "pull_request", "number", default=0),
            head_ref=safe_extract(payload, "pull_request", "head", "ref", default=""),
        )
    except ValidationError as e:
        raise ConfigError(f"Malformed pull request event payload: {e}") from e


def load_event_payload(path: Optional[str]) -> Dict[str, Any]:
    """Read the event payload JSON; an unset path yields an empty payload."""
    if not path:
        return {}
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Failed to read event payload {path}: {e}") from e
