#!/usr/bin/env python3
"""PR comment replacement for the size report.

Our comments are recognised by a fixed leading marker. Any comment whose body
starts with that exact text is treated as ours, whoever posted it; external
tooling may match on the same text, so it must stay byte-identical.

Listing, deleting and creating are separate API calls with no transaction: a
concurrent run on the same pull request can interleave with this one.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from configs.config import Config
from utils.pr_models import PullRequestRef


logger = logging.getLogger(__name__)


def _has_marker(body: Optional[str], marker: str) -> bool:
    return bool(body) and body.startswith(marker)


class PRCommenter:
    def __init__(self, client, *, marker: Optional[str] = None):
        """
        Args:
            client: Object exposing list_issue_comments, delete_issue_comment
                and create_issue_comment (see clients.github_client.GithubClient)
            marker: Leading marker of our comments (defaults to Config.COMMENT_MARKER)
        """
        self.client = client
        self.marker = marker if marker is not None else Config.COMMENT_MARKER

    def find_previous_comments(self, pr: PullRequestRef) -> List[Dict[str, Any]]:
        comments = self.client.list_issue_comments(pr.owner, pr.repo, pr.number)
        return [c for c in comments if _has_marker(c.get("body"), self.marker)]

    def remove_previous_comments(self, pr: PullRequestRef) -> int:
        """Delete every earlier report comment on the pull request.

        Returns the number of deleted comments.
        """
        logger.info("Checking for existing filediff comments to replace...")
        deleted = 0
        for comment in self.find_previous_comments(pr):
            self.client.delete_issue_comment(pr.owner, pr.repo, int(comment["id"]))
            deleted += 1

        if deleted:
            logger.info(f"Deleted {deleted} existing filediff comment(s)")
        else:
            logger.info("No existing filediff comments found")
        return deleted

    def publish(self, pr: PullRequestRef, body: str, *, replace: bool = True) -> Dict[str, Any]:
        """Post the report, first removing earlier reports when `replace` is set.

        Returns the created comment.
        """
        if not _has_marker(body, self.marker):
            body = f"{self.marker}\n{body}"
        if replace:
            self.remove_previous_comments(pr)
        created = self.client.create_issue_comment(pr.owner, pr.repo, pr.number, body)
        logger.info(f"Comment posted successfully to PR {pr}")
        return created
