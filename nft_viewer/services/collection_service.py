"""
Collection service for NFT Viewer.

Collection fields are advisory display data: every read degrades to its
zero value instead of aborting the pipeline.
"""

import asyncio
import logging
from typing import Optional

from nft_viewer.clients.contract_client import ERC721Client
from nft_viewer.models.nft import CollectionMetadata
from nft_viewer.services.base_service import BaseService

logger = logging.getLogger(__name__)


class CollectionResolver(BaseService):
    """Service for reading collection-level contract metadata."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        super().__init__(logger=logger)

    async def resolve_collection(self, contract: ERC721Client) -> CollectionMetadata:
        """
        Read name, symbol, baseURI and totalSupply from the contract.

        The four reads run concurrently. A failing read yields "" or 0 and
        is logged; this method never raises for a contract-call failure.

        Args:
            contract: Client bound to the collection contract

        Returns:
            CollectionMetadata
        """
        address = getattr(contract, "address", "<contract>")
        name, symbol, base_uri, total_supply = await asyncio.gather(
            self.execute_with_fallback(contract.name(), "", f"name() unreadable for {address}"),
            self.execute_with_fallback(contract.symbol(), "", f"symbol() unreadable for {address}"),
            self.execute_with_fallback(contract.base_uri(), "", f"baseURI() unreadable for {address}"),
            self.execute_with_fallback(contract.total_supply(), 0, f"totalSupply() unreadable for {address}"),
        )

        if isinstance(total_supply, bool) or not isinstance(total_supply, int) or total_supply < 0:
            self.logger.warning(f"totalSupply() for {address} returned {total_supply!r}, using 0")
            total_supply = 0

        collection = CollectionMetadata(
            name=name if isinstance(name, str) else "",
            symbol=symbol if isinstance(symbol, str) else "",
            base_uri=base_uri if isinstance(base_uri, str) else "",
            total_supply=total_supply
        )
        self.logger.debug(f"Resolved collection {address}: {collection!r}")
        return collection
