"""
Tests for scope-based authorization of remote methods.

A regular token (no scopes) carries DEFAULT access; a scoped token carries
only the scopes it was created with. Methods declare the scopes they accept.
"""
import logging

import pytest

from scoped_auth.services.tokens import create_access_token
from tests.constants import CUSTOM_SCOPE, URLs


@pytest.fixture
def regular_token(db, test_user):
    return create_access_token(db, test_user, ttl=60)


@pytest.fixture
def scoped_token(db, test_user):
    return create_access_token(db, test_user, ttl=60, scopes=[CUSTOM_SCOPE])


@pytest.fixture
def default_and_custom_token(db, test_user):
    return create_access_token(db, test_user, ttl=60, scopes=["DEFAULT", CUSTOM_SCOPE])


@pytest.fixture(autouse=True)
def fail_on_server_errors(caplog):
    """Surface any server error logged while handling a request."""
    caplog.set_level(logging.INFO, logger="scoped_auth")
    yield
    errors = [r for r in caplog.get_records("call") if r.levelno >= logging.ERROR]
    assert not errors, [r.getMessage() for r in errors]


def test_denies_regular_token_to_invoke_custom_scoped_method(client, regular_token):
    response = client.get(URLs.SCOPED, headers={"Authorization": regular_token.id})

    assert response.status_code == 401
    data = response.json()
    assert data["success"] is False
    assert data["error"] == "Unauthorized"
    assert data["data"]["method"] == "scoped"
    assert data["data"]["required_scopes"] == [CUSTOM_SCOPE]
    assert data["data"]["your_scopes"] == []


def test_allows_regular_token_to_invoke_default_scoped_method(client, test_user, regular_token):
    response = client.get(
        URLs.USER.format(test_user.id),
        headers={"Authorization": regular_token.id},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["data"]["id"] == test_user.id
    assert data["data"]["email"] == "test@example.com"
    assert "hashed_password" not in data["data"]


def test_allows_scoped_token_to_invoke_custom_scoped_method(client, scoped_token):
    response = client.get(URLs.SCOPED, headers={"Authorization": scoped_token.id})

    assert response.status_code == 204
    assert response.content == b""


def test_denies_scoped_token_to_invoke_default_scoped_method(client, test_user, scoped_token):
    response = client.get(
        URLs.USER.format(test_user.id),
        headers={"Authorization": scoped_token.id},
    )

    assert response.status_code == 401
    data = response.json()
    assert data["data"]["method"] == "findById"
    assert data["data"]["required_scopes"] == ["DEFAULT"]
    assert data["data"]["your_scopes"] == [CUSTOM_SCOPE]


class TestTokenWithDefaultAndCustomScope:
    def test_allows_invocation_of_default_scoped_method(
        self, client, test_user, default_and_custom_token
    ):
        response = client.get(
            URLs.USER.format(test_user.id),
            headers={"Authorization": default_and_custom_token.id},
        )

        assert response.status_code == 200

    def test_allows_invocation_of_custom_scoped_method(self, client, default_and_custom_token):
        response = client.get(
            URLs.SCOPED,
            headers={"Authorization": default_and_custom_token.id},
        )

        assert response.status_code == 204


def test_allows_invocation_when_at_least_one_method_scope_is_matched(
    make_client, db, test_user
):
    client = make_client(SCOPED_METHOD_ACCESS_SCOPES=["read", "write"])
    token = create_access_token(db, test_user, ttl=60, scopes=["read", "execute"])

    response = client.get(URLs.SCOPED, headers={"Authorization": token.id})

    assert response.status_code == 204


def test_denies_invocation_when_no_method_scope_is_matched(make_client, db, test_user):
    client = make_client(SCOPED_METHOD_ACCESS_SCOPES=["read", "write"])
    token = create_access_token(db, test_user, ttl=60, scopes=["execute"])

    response = client.get(URLs.SCOPED, headers={"Authorization": token.id})

    assert response.status_code == 401


def test_scope_denial_is_logged(client, scoped_token, caplog):
    client.get(URLs.SCOPED, headers={"Authorization": "not-a-token"})
    client.get(URLs.USER.format(scoped_token.user_id), headers={"Authorization": scoped_token.id})

    denials = [r for r in caplog.records if r.name == "scoped_auth.access"]
    assert len(denials) == 1
    assert denials[0].levelno == logging.WARNING
    assert "findById" in denials[0].getMessage()


def test_bearer_prefix_is_accepted(client, scoped_token):
    response = client.get(URLs.SCOPED, headers={"Authorization": f"Bearer {scoped_token.id}"})

    assert response.status_code == 204


def test_token_accepted_from_query_and_x_access_token_header(client, scoped_token):
    response = client.get(URLs.SCOPED, params={"access_token": scoped_token.id})
    assert response.status_code == 204

    response = client.get(URLs.SCOPED, headers={"X-Access-Token": scoped_token.id})
    assert response.status_code == 204


def test_grant_is_logged_with_matching_scopes(client, scoped_token, caplog):
    caplog.set_level(logging.DEBUG, logger="scoped_auth")

    response = client.get(URLs.SCOPED, headers={"Authorization": scoped_token.id})
    assert response.status_code == 204

    grants = [
        r for r in caplog.records
        if r.name == "scoped_auth.access" and r.levelno == logging.DEBUG
    ]
    assert len(grants) == 1
    message = grants[0].getMessage()
    assert f"scoped granted to user {scoped_token.user_id}" in message
    assert CUSTOM_SCOPE in message
    assert f"GET {URLs.SCOPED}" in message
