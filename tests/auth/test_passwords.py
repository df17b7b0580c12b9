"""Tests for password hashing and verification."""

from gatehouse.auth.passwords import hash_password, verify_password


class TestPasswordHashing:
    """Tests for password hashing and verification."""

    def test_hash_password_returns_bcrypt_string(self):
        """Password hashing should return a 60 character bcrypt hash."""
        hashed = hash_password("secret")
        assert isinstance(hashed, str)
        assert len(hashed) == 60
        assert hashed.startswith("$2b$")

    def test_hash_password_different_hashes(self):
        """Same password should produce different hashes (due to salt)."""
        assert hash_password("secret") != hash_password("secret")

    def test_hash_is_not_plaintext(self):
        assert hash_password("secret") != "secret"

    def test_verify_password_valid(self):
        hashed = hash_password("secret")
        assert verify_password("secret", hashed) is True

    def test_verify_password_invalid(self):
        hashed = hash_password("secret")
        assert verify_password("Secret", hashed) is False
        assert verify_password("", hashed) is False

    def test_verify_password_unicode(self):
        hashed = hash_password("sécret🔒")
        assert verify_password("sécret🔒", hashed) is True
        assert verify_password("sécret", hashed) is False

    def test_verify_against_malformed_hash_is_false(self):
        """A corrupt stored hash counts as a mismatch, not an error."""
        assert verify_password("secret", "not-a-bcrypt-hash") is False
