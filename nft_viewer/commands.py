"""
Command orchestration for NFT Viewer.

This module wires the resolution services together for the ``view`` and
``download`` commands. The collection is always resolved first; a single
token is then resolved on request, or the whole collection is batched.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, List, Optional

from nft_viewer.clients.contract_client import ERC721Client
from nft_viewer.clients.http_client import MetadataFetcher
from nft_viewer.config import ViewerConfig
from nft_viewer.display.viewer import Viewer
from nft_viewer.logging_config import get_logger
from nft_viewer.models.nft import BatchItemResult, CollectionMetadata, TokenMetadata
from nft_viewer.services.batch_service import BatchIterator
from nft_viewer.services.collection_service import CollectionResolver
from nft_viewer.services.image_service import DisplaySurface, ImageMaterializer
from nft_viewer.services.token_service import TokenResolver
from nft_viewer.uri import UriResolver

logger = get_logger(__name__)


@dataclass(frozen=True)
class ViewResult:
    """What the ``view`` command resolved and displayed."""

    collection: CollectionMetadata
    token: Optional[TokenMetadata] = None


class NFTPipeline:
    """The resolution pipeline bound to one contract."""

    def __init__(
        self,
        config: ViewerConfig,
        contract: ERC721Client,
        fetcher: MetadataFetcher,
        viewer: Optional[Viewer] = None,
        surface: Optional[DisplaySurface] = None
    ):
        """
        Initialize the pipeline.

        Args:
            config: Viewer configuration
            contract: Client bound to the collection contract
            fetcher: HTTP fetcher shared by the token and image stages
            viewer: Table printer. Defaults to a rich-backed Viewer.
            surface: Display surface for rendered images
        """
        self.config = config
        self.contract = contract
        self.fetcher = fetcher
        self.viewer = viewer or Viewer()

        uri_resolver = UriResolver(config.ipfs_gateway)
        self.collections = CollectionResolver()
        self.tokens = TokenResolver(fetcher, uri_resolver)
        self.images = ImageMaterializer(fetcher, uri_resolver, surface)
        self.batch = BatchIterator(
            self.tokens,
            self.images,
            policy=config.failure_policy,
            concurrency=config.batch_concurrency,
            on_start=self.viewer.show_progress
        )

    @property
    def output_dir(self) -> Path:
        """Directory named after the collection address under the output root."""
        return Path(self.config.output_root) / self.contract.address

    async def view(self, token_id: Optional[int] = None, show: bool = False) -> ViewResult:
        """
        Resolve and print the collection and, optionally, one token.

        Args:
            token_id: Token to resolve; None shows only the collection
            show: Render the token image below the tables

        Returns:
            ViewResult
        """
        collection = await self.collections.resolve_collection(self.contract)
        token = None
        if token_id is not None:
            token = await self.tokens.resolve_token(token_id, self.contract)

        self.viewer.clear()
        self.viewer.show_collection(collection, self.contract.address)

        if token is not None:
            self.viewer.show_token(token)
            if show:
                self.viewer.show_image_header()
                await self.images.render(token.image_uri, len(token.attributes))

        return ViewResult(collection=collection, token=token)

    async def download(
        self,
        token_id: Optional[int] = None,
        output_dir: Optional[Path] = None
    ) -> List[BatchItemResult]:
        """
        Save one token image, or every image in the collection.

        Args:
            token_id: Token to save; None downloads the whole collection
            output_dir: Override for the destination directory

        Returns:
            Per-token results ordered by token id
        """
        destination = Path(output_dir) if output_dir is not None else self.output_dir
        collection = await self.collections.resolve_collection(self.contract)

        if token_id is not None:
            path = await self.batch.download_one(token_id, self.contract, destination)
            return [BatchItemResult(token_id=token_id, path=path)]

        logger.info(f"Downloading {collection.total_supply} tokens to {destination}")
        return await self.batch.download_all(collection, self.contract, destination)


@asynccontextmanager
async def open_pipeline(
    address: str,
    config: ViewerConfig,
    viewer: Optional[Viewer] = None
) -> AsyncIterator[NFTPipeline]:
    """
    Build a pipeline for ``address`` and release its clients afterwards.

    Raises:
        ValidationError: If the address is invalid
    """
    contract = ERC721Client(address, config)
    fetcher = MetadataFetcher(config)
    try:
        yield NFTPipeline(config, contract, fetcher, viewer=viewer)
    finally:
        await fetcher.close()
        await contract.close()
