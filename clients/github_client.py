#!/usr/bin/env python3
"""GitHub REST API client for pull request comments.

Covers the three calls the size report needs: listing the comments of a pull
request, deleting a comment and creating one. Requests are not retried; any
failure is surfaced to the caller.
"""

import logging
from typing import Dict, List, Any, Optional

import requests

from configs.config import Config, require_token
from utils.errors import FileDiffError

# Set up logging
logger = logging.getLogger(__name__)

MAX_PAGES = 50
PER_PAGE = 100


class GithubAuthError(FileDiffError):
    """Raised when GitHub API authentication fails."""

    def __init__(self, message: str, code: str = "UNAUTHORIZED"):
        super().__init__(message, code=code)


class GithubApiError(FileDiffError):
    """Raised when GitHub API operations fail."""

    def __init__(self, message: str, code: str = "HTTP", status_code: Optional[int] = None):
        super().__init__(message, code=code)
        self.status_code = status_code


class GithubClient:
    """Client for the GitHub issue comment endpoints."""

    def __init__(
        self,
        token: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout_s: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        """Initialize GitHub client.

        Args:
            token: GitHub token (defaults to Config.GITHUB_TOKEN)
            api_url: API base URL (defaults to Config.GITHUB_API_URL)
            timeout_s: Request timeout in seconds (defaults to Config.HTTP_TIMEOUT_S)
            session: Optional pre-built session, mainly for tests

        Raises:
            ConfigError: If no token is available
        """
        github_config = Config.get_github_config()
        self.token = require_token(token or github_config["token"])
        self.base_url = (api_url or github_config["api_url"]).rstrip("/")
        self.timeout_s = timeout_s or github_config["timeout_s"]

        self.session = session or requests.Session()
        self.session.headers.update({
            'Authorization': f'token {self.token}',
            'Accept': 'application/vnd.github+json',
            'User-Agent': 'filediff/1.0'
        })

        logger.debug("GitHub client initialized")

    def _check(self, response: requests.Response, what: str) -> None:
        if response.status_code == 401:
            raise GithubAuthError("Invalid GitHub token or insufficient permissions")
        if response.status_code == 403:
            raise GithubAuthError(f"Forbidden while trying to {what}", code="FORBIDDEN")
        if response.status_code == 404:
            raise GithubApiError(f"Not found while trying to {what}", code="NOT_FOUND", status_code=404)
        if response.status_code == 429:
            raise GithubApiError(f"Rate limited while trying to {what}", code="RATE_LIMIT", status_code=429)
        if response.status_code >= 400:
            raise GithubApiError(
                f"GitHub API error while trying to {what}: HTTP {response.status_code}",
                status_code=response.status_code,
            )

    def list_issue_comments(self, owner: str, repo: str, number: int) -> List[Dict[str, Any]]:
        """Fetch every comment of an issue or pull request.

        Args:
            owner: Repository owner
            repo: Repository name
            number: Issue or pull request number

        Returns:
            List of comment dictionaries (id, body, user, ...)

        Raises:
            GithubAuthError, GithubApiError: If a request fails
        """
        url = f"{self.base_url}/repos/{owner}/{repo}/issues/{number}/comments"
        what = f"list comments of {owner}/{repo}#{number}"

        try:
            logger.info(f"Fetching comments: {owner}/{repo}#{number}")
            all_comments: List[Dict[str, Any]] = []
            page = 1

            while True:
                params = {'page': page, 'per_page': PER_PAGE}
                response = self.session.get(url, params=params, timeout=self.timeout_s)
                self._check(response, what)

                page_comments = response.json()
                if not page_comments:
                    break

                all_comments.extend(page_comments)
                if len(page_comments) < PER_PAGE:
                    break
                page += 1

                if page > MAX_PAGES:
                    raise GithubApiError(
                        f"#{number} has more than {MAX_PAGES * PER_PAGE} comments, refusing to {what} partially",
                        code="TOO_MANY_COMMENTS",
                    )

            logger.debug(f"Retrieved {len(all_comments)} comments for #{number}")
            return all_comments

        except requests.RequestException as e:
            raise GithubApiError(f"Failed to {what}: {e}", code="NETWORK") from e

    def delete_issue_comment(self, owner: str, repo: str, comment_id: int) -> None:
        """Delete one issue comment by id."""
        url = f"{self.base_url}/repos/{owner}/{repo}/issues/comments/{comment_id}"
        what = f"delete comment {comment_id} in {owner}/{repo}"
        try:
            logger.debug(f"Deleting comment {comment_id} in {owner}/{repo}")
            response = self.session.delete(url, timeout=self.timeout_s)
            self._check(response, what)
        except requests.RequestException as e:
            raise GithubApiError(f"Failed to {what}: {e}", code="NETWORK") from e

    def create_issue_comment(self, owner: str, repo: str, number: int, body: str) -> Dict[str, Any]:
        """Create a comment on an issue or pull request.

        Returns:
            The created comment dictionary
        """
        url = f"{self.base_url}/repos/{owner}/{repo}/issues/{number}/comments"
        what = f"create a comment on {owner}/{repo}#{number}"
        try:
            logger.debug(f"Creating comment on {owner}/{repo}#{number} ({len(body)} chars)")
            response = self.session.post(url, json={"body": body}, timeout=self.timeout_s)
            self._check(response, what)
            return response.json()
        except requests.RequestException as e:
            raise GithubApiError(f"Failed to {what}: {e}", code="NETWORK") from e

    def close(self) -> None:
        """Close the GitHub client session."""
        if self.session:
            self.session.close()
            logger.debug("GitHub client session closed")
