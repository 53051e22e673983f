import pytest

from models.account import Account
from utils.exceptions import CredentialRejected

BCRYPT_HASH = "$2b$12$KIXQJ0wz1bVtJc6n1Yk7UeW0m1t5dQk8o4ZK0b5y7q5l0h9W2xY6e"


def test_new_hashes_use_pbkdf2(services):
    hashed = services.auth.hash_password("longenough1")
    assert hashed.startswith("$pbkdf2-sha256$")
    assert services.auth.verify_password("longenough1", hashed)
    assert not services.auth.verify_password("wrong-password", hashed)


def test_foreign_hash_does_not_verify(services):
    assert services.auth.verify_password("longenough1", BCRYPT_HASH) is False
    assert services.auth.verify_password("longenough1", "plain-text") is False


def test_sign_in_with_foreign_hash_is_rejected(services):
    services.store.create(Account(email="a@b.com", password_hash=BCRYPT_HASH))
    with pytest.raises(CredentialRejected) as exc:
        services.auth.sign_in("a@b.com", "longenough1")
    assert exc.value.reason == CredentialRejected.INVALID_CREDENTIALS
