# tests/test_core/test_security.py

import uuid
from datetime import timedelta

import pytest
from jose import jwt

from movies_api.core.config import settings
from movies_api.core.exceptions import AuthenticationRequiredException
from movies_api.core.security import Principal, create_access_token, decode_access_token


def _encode(claims):
    return jwt.encode(claims, settings.JWT_SECRET_KEY.get_secret_value(), algorithm=settings.JWT_ALGORITHM)


def test_token_round_trip_carries_capabilities():
    user_id = uuid.uuid4()
    principal = decode_access_token(create_access_token(user_id, trusted_member=True))

    assert principal.user_id == user_id
    assert principal.is_trusted_member is True
    assert principal.is_admin is False
    assert principal.via_api_key is False


@pytest.mark.parametrize(
    "claim, expected",
    [("true", True), ("TRUE", True), (True, True), ("false", False), (False, False), ("yes", False), (1, False)],
)
def test_capability_claims_accept_string_and_bool(claim, expected):
    principal = decode_access_token(_encode({"userid": str(uuid.uuid4()), "admin": claim}))
    assert principal.is_admin is expected


def test_expired_token_is_rejected():
    token = create_access_token(uuid.uuid4(), expires_delta=timedelta(seconds=-5))
    with pytest.raises(AuthenticationRequiredException) as exc:
        decode_access_token(token)
    assert exc.value.message == "Token has expired"


def test_token_signed_with_another_key_is_rejected():
    token = jwt.encode({"userid": str(uuid.uuid4())}, "some-other-secret", algorithm="HS256")
    with pytest.raises(AuthenticationRequiredException) as exc:
        decode_access_token(token)
    assert exc.value.status_code == 401


@pytest.mark.parametrize("claims", [{}, {"userid": "not-a-uuid"}])
def test_token_without_usable_userid_is_rejected(claims):
    with pytest.raises(AuthenticationRequiredException):
        decode_access_token(_encode(claims))


def test_admin_implies_trusted_member():
    user_id = uuid.uuid4()
    assert Principal(user_id, admin=True).is_trusted_member is True
    assert Principal(user_id, trusted_member=True).is_admin is False
    assert Principal(user_id).is_trusted_member is False
