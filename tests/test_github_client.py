from __future__ import annotations

from typing import Any

import pytest
import requests

from clients.github_client import GithubApiError, GithubAuthError, GithubClient
from configs.config import Config, ConfigError


class FakeResponse:
    def __init__(self, status_code: int, payload: Any = None):
        self.status_code = status_code
        self._payload = payload

    def json(self) -> Any:
        return self._payload


class FakeSession:
    def __init__(self, responses: list[FakeResponse]):
        self.headers: dict[str, str] = {}
        self.responses = list(responses)
        self.calls: list[tuple[str, str, dict]] = []
        self.closed = False

    def _next(self, method: str, url: str, **kwargs) -> FakeResponse:
        self.calls.append((method, url, kwargs))
        return self.responses.pop(0)

    def get(self, url, **kwargs):
        return self._next("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._next("POST", url, **kwargs)

    def delete(self, url, **kwargs):
        return self._next("DELETE", url, **kwargs)

    def close(self) -> None:
        self.closed = True


def _client(responses: list[FakeResponse]) -> tuple[GithubClient, FakeSession]:
    session = FakeSession(responses)
    client = GithubClient(token="t0ken", api_url="https://api.example.com/", timeout_s=5, session=session)
    return client, session


def test_missing_token_is_a_configuration_error(monkeypatch) -> None:
    monkeypatch.setattr(Config, "GITHUB_TOKEN", None)
    with pytest.raises(ConfigError):
        GithubClient(token=None, session=FakeSession([]))


def test_session_is_authenticated() -> None:
    _, session = _client([])
    assert session.headers["Authorization"] == "token t0ken"


def test_list_issue_comments_paginates() -> None:
    first_page = [{"id": i, "body": "x"} for i in range(100)]
    client, session = _client([FakeResponse(200, first_page), FakeResponse(200, [{"id": 100}])])

    comments = client.list_issue_comments("o", "r", 3)

    assert len(comments) == 101
    assert [c[2]["params"]["page"] for c in session.calls] == [1, 2]
    assert session.calls[0][1] == "https://api.example.com/repos/o/r/issues/3/comments"


def test_create_and_delete_comment() -> None:
    client, session = _client([FakeResponse(201, {"id": 9, "body": "hi"}), FakeResponse(204)])

    created = client.create_issue_comment("o", "r", 3, "hi")
    client.delete_issue_comment("o", "r", 9)

    assert created["id"] == 9
    assert session.calls[0][0] == "POST"
    assert session.calls[0][2]["json"] == {"body": "hi"}
    assert session.calls[1][:2] == ("DELETE", "https://api.example.com/repos/o/r/issues/comments/9")


@pytest.mark.parametrize(
    ("status", "error", "code"),
    [
        (401, GithubAuthError, "UNAUTHORIZED"),
        (403, GithubAuthError, "FORBIDDEN"),
        (404, GithubApiError, "NOT_FOUND"),
        (429, GithubApiError, "RATE_LIMIT"),
        (500, GithubApiError, "HTTP"),
    ],
)
def test_http_errors_are_typed(status: int, error: type, code: str) -> None:
    client, _ = _client([FakeResponse(status)])
    with pytest.raises(error) as excinfo:
        client.create_issue_comment("o", "r", 3, "hi")
    assert excinfo.value.code == code


def test_transport_errors_become_api_errors() -> None:
    client, session = _client([])

    def boom(url, **kwargs):
        raise requests.ConnectionError("down")

    session.get = boom  # type: ignore[method-assign]
    with pytest.raises(GithubApiError) as excinfo:
        client.list_issue_comments("o", "r", 3)
    assert excinfo.value.code == "NETWORK"


def test_close_closes_session() -> None:
    client, session = _client([])
    client.close()
    assert session.closed


def test_list_issue_comments_refuses_partial_listing(monkeypatch) -> None:
    monkeypatch.setattr("clients.github_client.MAX_PAGES", 2)
    full_page = [{"id": i, "body": "x"} for i in range(100)]
    client, session = _client([FakeResponse(200, full_page), FakeResponse(200, full_page)])

    with pytest.raises(GithubApiError) as excinfo:
        client.list_issue_comments("o", "r", 3)

    assert excinfo.value.code == "TOO_MANY_COMMENTS"
    assert len(session.calls) == 2
