"""Password hashing contract tests."""

from __future__ import annotations

import pytest

from classfolio.core.password import HashingError
from classfolio.core.password import PasswordHasher


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


def test_hash_is_not_plaintext(hasher: PasswordHasher) -> None:
    """Input: plaintext secret1 -> Output: hash value differs from plaintext."""
    hashed = hasher.hash("secret1")
    assert hashed != "secret1"
    assert "secret1" not in hashed


def test_verify_matches_original_password(hasher: PasswordHasher) -> None:
    hashed = hasher.hash("secret1")
    assert hasher.verify("secret1", hashed) is True


@pytest.mark.parametrize("wrong", ["secret2", "Secret1", "secret1 ", ""])
def test_verify_rejects_other_passwords(hasher: PasswordHasher, wrong: str) -> None:
    hashed = hasher.hash("secret1")
    assert hasher.verify(wrong, hashed) is False


def test_same_password_hashes_differently_each_call(hasher: PasswordHasher) -> None:
    """Input: hash same plaintext twice -> Output: distinct salted hashes, both verify."""
    first = hasher.hash("secret1")
    second = hasher.hash("secret1")
    assert first != second
    assert hasher.verify("secret1", first)
    assert hasher.verify("secret1", second)


def test_cost_factor_is_encoded_in_hash() -> None:
    hashed = PasswordHasher(rounds=5).hash("secret1")
    assert hashed.startswith("$2b$05$")


@pytest.mark.parametrize("stored", ["", "not-a-hash", "$2b$04$short"])
def test_malformed_stored_hash_raises_hashing_error(hasher: PasswordHasher, stored: str) -> None:
    with pytest.raises(HashingError):
        hasher.verify("secret1", stored)


@pytest.mark.parametrize("plaintext", ["secret\x001", "\x00\x00\x00\x00\x00\x00", "pass\ud800word"])
def test_any_string_content_hashes_and_verifies(hasher: PasswordHasher, plaintext: str) -> None:
    """Input: NUL bytes or lone surrogates in the password -> Output: hash and verify succeed."""
    hashed = hasher.hash(plaintext)
    assert hasher.verify(plaintext, hashed) is True
    assert hasher.verify(plaintext + "x", hashed) is False


def test_nul_candidate_against_normal_hash_is_false(hasher: PasswordHasher) -> None:
    hashed = hasher.hash("secret")
    assert hasher.verify("sec\x00ret", hashed) is False
    assert hasher.verify("secret\x00", hashed) is False


def test_passwords_differing_after_72_bytes_are_distinct(hasher: PasswordHasher) -> None:
    prefix = "x" * 80
    hashed = hasher.hash(prefix + "a")
    assert hasher.verify(prefix + "a", hashed) is True
    assert hasher.verify(prefix + "b", hashed) is False
