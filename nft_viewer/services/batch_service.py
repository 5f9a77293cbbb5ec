"""
Batch download service for NFT Viewer.

Drives token resolution and image saving across a whole collection under
one of two failure policies:

- ``abort``: sequential, the first error propagates and later tokens are
  never attempted.
- ``collect``: bounded concurrency, every token is attempted and each
  failure is recorded in that token's BatchItemResult.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Union

from nft_viewer.clients.contract_client import ERC721Client
from nft_viewer.models.nft import BatchItemResult, CollectionMetadata
from nft_viewer.services.base_service import BaseService
from nft_viewer.services.image_service import ImageMaterializer
from nft_viewer.services.token_service import TokenResolver
from nft_viewer.utils.errors import NFTViewerError, StorageError

logger = logging.getLogger(__name__)

IMAGE_EXTENSION = ".png"


class FailurePolicy(str, Enum):
    """How a batch reacts to a failing token."""

    ABORT_ON_FIRST = "abort"
    COLLECT_ERRORS = "collect"


def token_path(destination_dir: Union[str, Path], token_id: int) -> Path:
    """Output file for a token: ``<destination_dir>/<token_id>.png``."""
    return Path(destination_dir) / f"{token_id}{IMAGE_EXTENSION}"


class BatchIterator(BaseService):
    """Service for downloading every token image of a collection."""

    def __init__(
        self,
        token_resolver: TokenResolver,
        image_materializer: ImageMaterializer,
        policy: Union[FailurePolicy, str] = FailurePolicy.COLLECT_ERRORS,
        concurrency: int = 4,
        on_start: Optional[Callable[[int], None]] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the batch iterator.

        Args:
            token_resolver: Resolver for token metadata
            image_materializer: Fetches and saves token images
            policy: Failure policy; see module docstring
            concurrency: Maximum tokens in flight under ``collect``
            on_start: Optional callback invoked with each token id before it is processed
            logger: Optional logger instance
        """
        super().__init__(logger=logger)
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1: {concurrency}")
        self.token_resolver = token_resolver
        self.image_materializer = image_materializer
        self.policy = FailurePolicy(policy)
        self.concurrency = concurrency
        self.on_start = on_start

    async def download_one(
        self,
        token_id: int,
        contract: ERC721Client,
        destination_dir: Union[str, Path]
    ) -> Path:
        """
        Resolve one token and save its image.

        Returns:
            The path written
        """
        if self.on_start is not None:
            self.on_start(token_id)
        token = await self.token_resolver.resolve_token(token_id, contract)
        return await self.image_materializer.save(token.image_uri, token_path(destination_dir, token_id))

    async def _attempt(
        self,
        token_id: int,
        contract: ERC721Client,
        destination_dir: Path
    ) -> BatchItemResult:
        try:
            path = await self.download_one(token_id, contract, destination_dir)
        except NFTViewerError as e:
            self.logger.warning(f"Token {token_id} failed: {e.message}")
            return BatchItemResult(token_id=token_id, error=e)
        return BatchItemResult(token_id=token_id, path=path)

    async def download_all(
        self,
        collection: CollectionMetadata,
        contract: ERC721Client,
        destination_dir: Union[str, Path]
    ) -> List[BatchItemResult]:
        """
        Download token ids ``0 .. total_supply - 1``.

        Args:
            collection: Collection metadata supplying total_supply
            contract: Client bound to the collection contract
            destination_dir: Directory receiving ``<token_id>.png`` files

        Returns:
            One BatchItemResult per token, ordered by ascending token id

        Raises:
            NFTViewerError: Under ``abort``, the first per-token failure
        """
        destination_dir = Path(destination_dir)
        try:
            destination_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Could not create {destination_dir}: {str(e)}", path=str(destination_dir)) from e
        token_ids = range(collection.total_supply)

        async with self.log_timing(f"Batch of {collection.total_supply} tokens ({self.policy.value})"):
            if self.policy is FailurePolicy.ABORT_ON_FIRST:
                results = []
                for token_id in token_ids:
                    path = await self.download_one(token_id, contract, destination_dir)
                    results.append(BatchItemResult(token_id=token_id, path=path))
                return results

            return await self.gather_with_concurrency(
                self.concurrency,
                token_ids,
                lambda token_id: self._attempt(token_id, contract, destination_dir)
            )
