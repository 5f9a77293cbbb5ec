"""ERC-721 contract client for NFT Viewer.

This module wraps a web3 contract bound to the ERC-721 metadata interface
and exposes its read-only calls as typed coroutines.
"""

from typing import Any, Optional

from web3 import AsyncWeb3

from nft_viewer.config import ViewerConfig
from nft_viewer.logging_config import get_logger
from nft_viewer.utils.errors import ContractCallError
from nft_viewer.utils.validation import to_checksum_address

logger = get_logger(__name__)


def _view(name: str, inputs: list, output_type: str) -> dict:
    return {
        "name": name,
        "type": "function",
        "stateMutability": "view",
        "inputs": inputs,
        "outputs": [{"name": "", "type": output_type}],
    }


ERC721_METADATA_ABI = [
    _view("name", [], "string"),
    _view("symbol", [], "string"),
    _view("baseURI", [], "string"),
    _view("totalSupply", [], "uint256"),
    _view("tokenURI", [{"name": "tokenId", "type": "uint256"}], "string"),
]


class ERC721Client:
    """Client for the read-only ERC-721 metadata calls of one contract."""

    def __init__(
        self,
        address: str,
        config: Optional[ViewerConfig] = None,
        contract: Any = None
    ):
        """Initialize the contract client.

        Args:
            address: The contract address
            config: Viewer configuration. Defaults to ViewerConfig().
            contract: Optional pre-built web3 contract object
        """
        self.config = config or ViewerConfig()
        self.address = to_checksum_address(address)
        self._w3: Optional[AsyncWeb3] = None

        if contract is None:
            self._w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(self.config.rpc_url))
            contract = self._w3.eth.contract(address=self.address, abi=ERC721_METADATA_ABI)
        self.contract = contract

    async def _call(self, method: str, *args: Any) -> Any:
        """Call a view function by ABI name, normalizing every failure.

        Raises:
            ContractCallError: If the RPC call or its decoding fails
        """
        try:
            function = getattr(self.contract.functions, method)
            result = await function(*args).call()
        except Exception as e:
            raise ContractCallError(
                f"Contract call {method}() on {self.address} failed: {str(e)}",
                method=method,
                details={"address": self.address}
            ) from e
        logger.debug(f"{self.address}.{method}() -> {result!r}")
        return result

    async def name(self) -> str:
        return await self._call("name")

    async def symbol(self) -> str:
        return await self._call("symbol")

    async def base_uri(self) -> str:
        return await self._call("baseURI")

    async def total_supply(self) -> int:
        return await self._call("totalSupply")

    async def token_uri(self, token_id: int) -> str:
        return await self._call("tokenURI", token_id)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Release the provider's HTTP session if one was opened."""
        if self._w3 is None:
            return
        disconnect = getattr(self._w3.provider, "disconnect", None)
        if disconnect is not None:
            await disconnect()
        self._w3 = None
