"""
Tests for bcrypt hashing / verification.
"""

import pytest

from auth.errors import HashingError, PasswordMismatchError, ValidationError
from auth.password import PasswordHasher


class TestPasswordHasher:
    def test_hash_then_verify(self, hasher):
        stored = hasher.hash("hunter2")
        hasher.verify(stored, "hunter2")

    def test_salt_differs_per_call(self, hasher):
        assert hasher.hash("hunter2") != hasher.hash("hunter2")

    def test_hash_is_not_plaintext(self, hasher):
        stored = hasher.hash("hunter2")
        assert "hunter2" not in stored
        assert stored.startswith("$2")

    @pytest.mark.parametrize("candidate", ["wrong1", "hunter3", "Hunter2", ""])
    def test_wrong_secret_rejected(self, hasher, candidate):
        stored = hasher.hash("hunter2")
        with pytest.raises(PasswordMismatchError):
            hasher.verify(stored, candidate)

    def test_garbage_stored_hash_is_a_mismatch(self, hasher):
        with pytest.raises(PasswordMismatchError):
            hasher.verify("NULL", "hunter2")

    def test_empty_secret_rejected(self, hasher):
        with pytest.raises(ValidationError):
            hasher.hash("")

    def test_primitive_failure_is_hashing_error(self):
        hasher = PasswordHasher(rounds=99)  # bcrypt accepts 4..31
        with pytest.raises(HashingError) as exc_info:
            hasher.hash("hunter2")
        assert exc_info.value.internal
        assert exc_info.value.public_message == "Internal server error"

    @pytest.mark.parametrize("secret", ["é" * 37, "x" * 73, "\U0001f511" * 19])
    def test_secret_over_72_bytes_rejected(self, hasher, secret):
        with pytest.raises(ValidationError, match="72 bytes"):
            hasher.hash(secret)

    def test_72_bytes_is_accepted(self, hasher):
        secret = "é" * 36
        hasher.verify(hasher.hash(secret), secret)

    def test_over_long_candidate_is_a_mismatch(self, hasher):
        stored = hasher.hash("hunter2")
        with pytest.raises(PasswordMismatchError):
            hasher.verify(stored, "é" * 72)
