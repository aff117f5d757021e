"""Shared test fixtures."""

import pytest
from ecdsa import SECP256k1, SigningKey
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.rk_common.chain_params import ChainParameters


@pytest.fixture
def params() -> ChainParameters:
    """Chain parameters matching the application defaults."""
    return app.state.params


@pytest.fixture
def signing_key() -> SigningKey:
    return SigningKey.from_secret_exponent(0x5EC2E7, curve=SECP256k1)


@pytest.fixture
def public_key_bytes(signing_key: SigningKey) -> bytes:
    return signing_key.get_verifying_key().to_string("compressed")


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
