"""
Token service for NFT Viewer.

This module resolves a single token: it reads the token URI from the
contract, fetches the metadata document it points to, and validates the
fields the pipeline depends on.
"""

import logging
from typing import Any, List, Optional

from nft_viewer.clients.contract_client import ERC721Client
from nft_viewer.clients.http_client import MetadataFetcher, require_field
from nft_viewer.models.nft import Attribute, TokenMetadata
from nft_viewer.services.base_service import BaseService
from nft_viewer.uri import UriResolver
from nft_viewer.utils.errors import ContractCallError, TokenUriError
from nft_viewer.utils.validation import validate_token_id

logger = logging.getLogger(__name__)


def parse_attributes(raw_attributes: List[Any]) -> List[Attribute]:
    """
    Convert the metadata ``attributes`` array into Attribute models.

    Order is preserved exactly as it appears in the document.

    Args:
        raw_attributes: The ``attributes`` array of a metadata document

    Returns:
        List of Attribute

    Raises:
        MissingFieldError: If an element is not an object with string
            ``trait_type`` and ``value``
    """
    attributes = []
    for index, item in enumerate(raw_attributes):
        context = f"attributes[{index}]"
        trait_type = require_field(item, "trait_type", str, context)
        value = require_field(item, "value", str, context)
        attributes.append(Attribute(trait_type=trait_type, value=value))
    return attributes


class TokenResolver(BaseService):
    """Service for resolving token metadata documents."""

    def __init__(
        self,
        fetcher: MetadataFetcher,
        uri_resolver: Optional[UriResolver] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the token resolver.

        Args:
            fetcher: HTTP fetcher for metadata documents
            uri_resolver: Resolver for ipfs:// references
            logger: Optional logger instance
        """
        super().__init__(logger=logger)
        self.fetcher = fetcher
        self.uri_resolver = uri_resolver or UriResolver(fetcher.config.ipfs_gateway)

    async def _read_token_uri(self, token_id: int, contract: ERC721Client) -> str:
        """
        Read tokenURI(token_id), failing fast.

        Raises:
            TokenUriError: If the call fails or returns an empty URI
        """
        try:
            token_uri = await contract.token_uri(token_id)
        except ContractCallError as e:
            raise TokenUriError(
                f"tokenURI({token_id}) failed: {e.message}",
                token_id=token_id,
                details=dict(e.details)
            ) from e
        except Exception as e:
            raise TokenUriError(
                f"tokenURI({token_id}) failed: {str(e)}",
                token_id=token_id
            ) from e

        if not isinstance(token_uri, str) or not token_uri:
            raise TokenUriError(
                f"tokenURI({token_id}) returned an empty URI",
                token_id=token_id
            )
        return token_uri

    async def resolve_token(self, token_id: int, contract: ERC721Client) -> TokenMetadata:
        """
        Resolve a token's metadata document.

        Args:
            token_id: The token id (unsigned 256-bit integer)
            contract: Client bound to the collection contract

        Returns:
            TokenMetadata

        Raises:
            ValidationError: If the token id is out of range
            TokenUriError: If the token URI cannot be read
            FetchError: If the metadata document cannot be retrieved
            ParseError: If the metadata document is not valid JSON
            MissingFieldError: If ``image`` or ``attributes`` is absent or malformed
        """
        validate_token_id(token_id)

        token_uri = await self._read_token_uri(token_id, contract)
        metadata_url = self.uri_resolver.resolve(token_uri)
        self.logger.debug(f"Token {token_id}: {token_uri} -> {metadata_url}")

        document = await self.fetcher.fetch_json(metadata_url)

        context = f"token {token_id}"
        image_uri = require_field(document, "image", str, context)
        raw_attributes = require_field(document, "attributes", list, context)
        attributes = parse_attributes(raw_attributes)

        return TokenMetadata(
            token_id=str(token_id),
            token_uri=token_uri,
            image_uri=image_uri,
            attributes=tuple(attributes)
        )
