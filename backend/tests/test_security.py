import pytest
from jose import jwt

from recurate.core.config import settings
from recurate.core.exceptions import HashingError
from recurate.core.security import (
    get_password_hash,
    read_session_token,
    sign_session_token,
    verify_password,
)

PASSWORDS = ["p1", "correct horse battery staple", "ünïcødé-パスワード", " spaced ", "x" * 60]


@pytest.mark.parametrize("password", PASSWORDS)
def test_verify_accepts_own_hash(password):
    assert verify_password(password, get_password_hash(password))


def test_verify_rejects_other_passwords():
    hashes = {p: get_password_hash(p) for p in PASSWORDS}
    for p in PASSWORDS:
        for q, hashed in hashes.items():
            if p != q:
                assert not verify_password(p, hashed)


def test_hash_is_salted_and_never_plaintext():
    first = get_password_hash("p1")
    second = get_password_hash("p1")
    assert first != second
    assert "p1" not in first


def test_hash_uses_configured_work_factor():
    # conftest sets BCRYPT_ROUNDS=4
    assert get_password_hash("p1").startswith(f"$2b${settings.BCRYPT_ROUNDS:02d}$")


@pytest.mark.parametrize("bad_hash", ["", "not-a-hash", "$2b$04$tooshort", "$argon2id$v=19$m=1$xx$yy"])
def test_verify_malformed_hash_is_false_not_error(bad_hash):
    assert verify_password("p1", bad_hash) is False


def test_hashing_failure_is_surfaced():
    with pytest.raises(HashingError):
        get_password_hash(None)


def test_session_cookie_round_trip():
    signed = sign_session_token("opaque-token")
    assert signed != "opaque-token"
    assert read_session_token(signed) == "opaque-token"


def test_session_cookie_tampering_is_rejected():
    signed = sign_session_token("opaque-token")
    header, payload, signature = signed.split(".")
    swapped_payload = sign_session_token("someone-else").split(".")[1]
    forged = jwt.encode({"sid": "someone-else"}, "wrong-secret", algorithm="HS256")
    assert read_session_token(f"{header}.{swapped_payload}.{signature}") is None
    assert read_session_token(forged) is None


@pytest.mark.parametrize("value", [None, "", "garbage", "a.b.c"])
def test_unreadable_cookie_means_no_session(value):
    assert read_session_token(value) is None
