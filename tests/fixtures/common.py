"""Common test fixtures for NFT Viewer tests.

This module provides fixtures that can be reused across different test modules.
"""

import io

import pytest
import pytest_asyncio
from PIL import Image
from rich.console import Console
from unittest.mock import AsyncMock

from nft_viewer.clients.contract_client import ERC721Client
from nft_viewer.clients.http_client import MetadataFetcher
from nft_viewer.config import ViewerConfig

CONTRACT_ADDRESS = "0xBC4CA0EdA7647A8aB7C2061c2E118A18a936f13D"
GATEWAY = "https://gateway.test/ipfs/"


def make_png(width: int = 4, height: int = 3, color=(255, 0, 0), fmt: str = "PNG") -> bytes:
    """Encode a solid-colour image in memory."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def config():
    """Configuration pointing at a fake gateway."""
    return ViewerConfig(
        rpc_url="http://localhost:8545",
        ipfs_gateway=GATEWAY,
        batch_concurrency=4,
        failure_policy="collect",
    )


@pytest_asyncio.fixture
async def fetcher(config):
    """A MetadataFetcher whose requests are intercepted by respx."""
    client = MetadataFetcher(config)
    yield client
    await client.close()


@pytest.fixture
def mock_contract():
    """Create a mock ERC-721 contract client for a three-token collection."""
    client = AsyncMock(spec=ERC721Client)
    client.address = CONTRACT_ADDRESS

    client.name.return_value = "BoredApeYachtClub"
    client.symbol.return_value = "BAYC"
    client.base_uri.return_value = "ipfs://QmBase/"
    client.total_supply.return_value = 3

    async def token_uri(token_id):
        return f"ipfs://QmMeta/{token_id}"

    client.token_uri.side_effect = token_uri
    return client


@pytest.fixture
def sample_metadata():
    """Metadata document with attributes in non-alphabetical order."""
    return {
        "name": "Ape #1",
        "image": "ipfs://QmImage/1.png",
        "attributes": [
            {"trait_type": "Eyes", "value": "Blue"},
            {"trait_type": "Hat", "value": "Red"},
            {"trait_type": "Background", "value": "Orange"},
        ],
    }


@pytest.fixture
def test_console():
    """A rich Console that writes to a string buffer."""
    return Console(file=io.StringIO(), width=200, force_terminal=False, color_system=None)
