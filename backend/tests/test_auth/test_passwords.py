"""Unit tests for password hashing and verification."""

from app.auth.passwords import DUMMY_HASH, hash_password, verify_password


class TestHashPassword:
    def test_hash_differs_from_plaintext(self):
        hashed = hash_password("mypassword")
        assert isinstance(hashed, str)
        assert hashed != "mypassword"

    def test_same_password_different_salts(self):
        assert hash_password("samepassword") != hash_password("samepassword")


class TestVerifyPassword:
    def test_correct_and_wrong_password(self):
        hashed = hash_password("testpass123")
        assert verify_password("testpass123", hashed) is True
        assert verify_password("wrongpassword", hashed) is False

    def test_unicode_password(self):
        hashed = hash_password("pässwörd-日本")
        assert verify_password("pässwörd-日本", hashed) is True

    def test_long_password_is_truncated_consistently(self):
        long_password = "x" * 100
        hashed = hash_password(long_password)
        assert verify_password(long_password, hashed) is True

    def test_malformed_hash_is_a_mismatch(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False

    def test_dummy_hash_rejects_ordinary_passwords(self):
        assert verify_password("adminpass123", DUMMY_HASH) is False
