from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from jose import jwt

from storefront.common import AuthorizationError, ServiceSettings
from storefront.common.money import from_cents, to_cents
from storefront.common.security import (
    Principal,
    create_token,
    create_token_pair,
    decode_token,
    hash_password,
    verify_password,
)

SETTINGS = ServiceSettings(enable_metrics=False)
SHOPPER = Principal(user_id=12, email="shopper@example.com", role="CUSTOMER")


def test_money_round_trips_through_cents() -> None:
    assert to_cents(Decimal("19.98")) == 1998
    assert to_cents(Decimal("0.005")) == 1
    assert from_cents(1998) == Decimal("19.98")
    assert str(from_cents(0)) == "0.00"


def test_password_hashes_verify() -> None:
    hashed = hash_password("correct horse")
    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed)
    assert not verify_password("battery staple", hashed)


def test_token_pair_claims() -> None:
    pair = create_token_pair(SHOPPER, SETTINGS)

    claims = jwt.decode(pair.access_token, SETTINGS.jwt_secret_key, algorithms=[SETTINGS.jwt_algorithm])
    assert claims["sub"] == "12"
    assert claims["role"] == "CUSTOMER"
    assert claims["type"] == "access"

    assert decode_token(pair.access_token, SETTINGS) == SHOPPER
    assert decode_token(pair.refresh_token, SETTINGS, token_type="refresh") == SHOPPER


def test_tokens_are_not_interchangeable() -> None:
    pair = create_token_pair(SHOPPER, SETTINGS)

    with pytest.raises(AuthorizationError):
        decode_token(pair.refresh_token, SETTINGS, token_type="access")
    with pytest.raises(AuthorizationError):
        decode_token(pair.access_token, SETTINGS, token_type="refresh")


def test_expired_token_is_rejected() -> None:
    issued = datetime.now(timezone.utc) - timedelta(hours=1)
    token = jwt.encode(
        {"sub": "12", "email": SHOPPER.email, "role": "CUSTOMER", "type": "access", "exp": issued},
        SETTINGS.jwt_secret_key,
        algorithm=SETTINGS.jwt_algorithm,
    )

    with pytest.raises(AuthorizationError, match="Invalid or expired access token"):
        decode_token(token, SETTINGS)


def test_admin_principal() -> None:
    assert Principal(user_id=1, email="root@example.com", role="ADMIN").is_admin
    assert not SHOPPER.is_admin
    assert create_token(SHOPPER, SETTINGS) != create_token(SHOPPER, SETTINGS.model_copy(update={"jwt_secret_key": "another-secret"}))
