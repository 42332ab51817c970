import pytest

ED25519_KEY = "7a3c5477bdf4a63742647d7cfc4544acc1899d07141caf4cd9fea2f75b28a5cc"


@pytest.fixture
def ed25519_key() -> str:
    return ED25519_KEY
