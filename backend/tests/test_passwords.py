"""
Inkwell Backend: Password Hashing Unit Tests
============================================

What:  Tests for the bcrypt helpers in app.services.passwords.
How:   Real bcrypt at the minimum cost factor (4) to keep the suite fast.
"""

import pytest

from app.exceptions import ValidationError
from app.services.passwords import (
    hash_password,
    hash_password_async,
    verify_password,
    verify_password_async,
)


class TestPasswordHashing:

    def test_hash_is_not_plaintext(self):
        hashed = hash_password("secret123", rounds=4)
        assert hashed != "secret123"
        assert hashed.startswith("$2")

    def test_same_password_gets_new_salt(self):
        assert hash_password("secret123", rounds=4) != hash_password("secret123", rounds=4)

    def test_verify_accepts_correct_password(self):
        hashed = hash_password("secret123", rounds=4)
        assert verify_password("secret123", hashed) is True

    def test_verify_rejects_wrong_password(self):
        hashed = hash_password("secret123", rounds=4)
        assert verify_password("wrong-password", hashed) is False

    def test_malformed_stored_hash_is_a_mismatch(self):
        assert verify_password("secret123", "not-a-bcrypt-hash") is False

    def test_verify_over_72_bytes_is_a_mismatch(self):
        """30 three-byte characters fit the length limit but not bcrypt's 72 bytes."""
        hashed = hash_password("secret123", rounds=4)
        assert verify_password("€" * 30, hashed) is False

    def test_password_over_72_bytes_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            hash_password("x" * 73, rounds=4)
        assert exc_info.value.context["field"] == "password"

    def test_multibyte_password_counted_in_bytes(self):
        # 25 three-byte characters = 75 bytes
        with pytest.raises(ValidationError):
            hash_password("€" * 25, rounds=4)

    @pytest.mark.asyncio
    async def test_async_helpers_round_trip(self):
        hashed = await hash_password_async("secret123", rounds=4)
        assert await verify_password_async("secret123", hashed) is True
        assert await verify_password_async("nope-nope", hashed) is False
