"""Unit tests for password hashing and verification."""

from staybook.auth.passwords import hash_password, verify_password


class TestHashPassword:
    def test_hash_is_bcrypt_string(self):
        hashed = hash_password("guestpass1")
        assert isinstance(hashed, str)
        assert hashed.startswith("$2")
        assert hashed != "guestpass1"

    def test_same_password_different_salts(self):
        assert hash_password("samepassword") != hash_password("samepassword")


class TestVerifyPassword:
    def test_round_trip(self):
        hashed = hash_password("testpass123")
        assert verify_password("testpass123", hashed) is True
        assert verify_password("wrongpassword", hashed) is False

    def test_unicode_password(self):
        hashed = hash_password("pässwördü")
        assert verify_password("pässwördü", hashed) is True
        assert verify_password("password", hashed) is False

    def test_max_length_password(self):
        long_pass = "a" * 72
        assert verify_password(long_pass, hash_password(long_pass)) is True

    def test_malformed_hash_is_a_mismatch(self):
        assert verify_password("testpass123", "not-a-bcrypt-hash") is False
