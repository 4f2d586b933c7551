from sqlalchemy import select

from scoped_auth.models.access_token import AccessToken
from scoped_auth.services.tokens import create_access_token
from tests.constants import CUSTOM_SCOPE, URLs


def _create_token(client, user_id, token_id, **body):
    return client.post(
        URLs.ACCESS_TOKENS.format(user_id),
        headers={"Authorization": token_id},
        json=body,
    )


def test_create_scoped_token_success(client, db, test_user):
    regular = create_access_token(db, test_user, ttl=60)

    response = _create_token(client, test_user.id, regular.id, ttl=60, scopes=[CUSTOM_SCOPE])

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["ttl"] == 60
    assert data["scopes"] == [CUSTOM_SCOPE]
    assert data["user_id"] == test_user.id
    assert data["id"] != regular.id

    stored = db.execute(select(AccessToken).where(AccessToken.id == data["id"])).scalar_one()
    assert stored.scopes == [CUSTOM_SCOPE]


def test_created_scoped_token_invokes_custom_method(client, db, test_user):
    regular = create_access_token(db, test_user, ttl=60)
    scoped = _create_token(client, test_user.id, regular.id, ttl=60, scopes=[CUSTOM_SCOPE])
    scoped_id = scoped.json()["data"]["id"]

    assert client.get(URLs.SCOPED, headers={"Authorization": scoped_id}).status_code == 204
    assert client.get(
        URLs.USER.format(test_user.id), headers={"Authorization": scoped_id}
    ).status_code == 401


def test_create_token_defaults(client, db, test_user):
    regular = create_access_token(db, test_user, ttl=60)

    response = _create_token(client, test_user.id, regular.id)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["ttl"] == 1209600
    assert data["scopes"] == []


def test_create_token_deduplicates_scopes(client, db, test_user):
    regular = create_access_token(db, test_user, ttl=60)

    response = _create_token(
        client, test_user.id, regular.id, scopes=["read", " read ", "write"]
    )

    assert response.status_code == 201
    assert response.json()["data"]["scopes"] == ["read", "write"]


def test_create_token_blank_scope_rejected(client, db, test_user):
    regular = create_access_token(db, test_user, ttl=60)

    response = _create_token(client, test_user.id, regular.id, scopes=["  "])

    assert response.status_code == 422


def test_create_token_invalid_ttl(client, db, test_user):
    regular = create_access_token(db, test_user, ttl=60)

    response = _create_token(client, test_user.id, regular.id, ttl=0)

    assert response.status_code == 422


def test_create_token_requires_default_scope(client, db, test_user):
    scoped = create_access_token(db, test_user, ttl=60, scopes=[CUSTOM_SCOPE])

    response = _create_token(client, test_user.id, scoped.id, scopes=["DEFAULT"])

    assert response.status_code == 401


def test_create_token_for_other_user_denied(client, db, test_user, other_user):
    regular = create_access_token(db, test_user, ttl=60)

    response = _create_token(client, other_user.id, regular.id, scopes=[CUSTOM_SCOPE])

    assert response.status_code == 401


def test_list_tokens(client, db, test_user, other_user):
    regular = create_access_token(db, test_user, ttl=60)
    scoped = create_access_token(db, test_user, ttl=60, scopes=[CUSTOM_SCOPE])
    create_access_token(db, other_user, ttl=60)

    response = client.get(
        URLs.ACCESS_TOKENS.format(test_user.id),
        headers={"Authorization": regular.id},
    )

    assert response.status_code == 200
    ids = {token["id"] for token in response.json()["data"]}
    assert ids == {regular.id, scoped.id}


def test_list_tokens_other_user_denied(client, db, test_user, other_user):
    regular = create_access_token(db, test_user, ttl=60)

    response = client.get(
        URLs.ACCESS_TOKENS.format(other_user.id),
        headers={"Authorization": regular.id},
    )

    assert response.status_code == 401
