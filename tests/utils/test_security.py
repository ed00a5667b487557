"""Tests for password hashing."""

import pytest

from writequest.utils.security import hash_password, verify_password


class TestPasswords:
    """Tests for hash_password and verify_password."""

    def test_round_trip(self):
        """A hashed password verifies."""
        stored = hash_password("correct horse")

        assert stored.startswith("$2b$")
        assert verify_password("correct horse", stored) is True
        assert verify_password("wrong horse", stored) is False

    def test_salted(self):
        """The same password hashes differently each time."""
        assert hash_password("pw") != hash_password("pw")

    @pytest.mark.parametrize("stored", ["", "plain", "md5$1$aa$bb", "pbkdf2_sha256$10$aa$bb"])
    def test_unrecognized_hash(self, stored):
        """Hashes from unknown schemes never match."""
        assert verify_password("pw", stored) is False
