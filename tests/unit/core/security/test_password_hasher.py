import pytest
from unittest.mock import patch

from cirplane.src.core.config.settings import Settings
from cirplane.src.core.security.password_hasher import PasswordHasher, generate_password


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(iterations=1000)


def test_hash_and_verify(hasher: PasswordHasher):
    encoded = hasher.hash_password("senha-forte")

    assert encoded.startswith("pbkdf2_sha256$1000$")
    assert "senha-forte" not in encoded
    assert hasher.verify_password("senha-forte", encoded) is True
    assert hasher.verify_password("senha-errada", encoded) is False


def test_same_password_gets_different_salts(hasher: PasswordHasher):
    assert hasher.hash_password("abc123") != hasher.hash_password("abc123")


def test_hash_from_other_iteration_count_still_verifies(hasher: PasswordHasher):
    encoded = PasswordHasher(iterations=2000).hash_password("abc123")
    assert hasher.verify_password("abc123", encoded) is True


@pytest.mark.parametrize("encoded", [
    "",
    "not-a-hash",
    "md5$1000$c2FsdA==$aGFzaA==",
    "pbkdf2_sha256$abc$c2FsdA==$aGFzaA==",
    "pbkdf2_sha256$1000$@@@$aGFzaA==",
])
def test_malformed_hashes_do_not_verify(hasher: PasswordHasher, encoded: str):
    assert hasher.verify_password("anything", encoded) is False


def test_iterations_default_from_settings():
    with patch("cirplane.src.core.security.password_hasher.get_settings") as mock_get_settings:
        mock_get_settings.return_value = Settings(PASSWORD_HASH_ITERATIONS=1234, _env_file=None)
        assert PasswordHasher().iterations == 1234


def test_non_positive_iterations_rejected():
    with pytest.raises(ValueError):
        PasswordHasher(iterations=0)


def test_generate_password_is_hex():
    password = generate_password(12)
    assert len(password) == 24
    int(password, 16)
    assert generate_password(12) != password
