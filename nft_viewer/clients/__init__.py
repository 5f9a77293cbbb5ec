"""Client modules for NFT Viewer.

This package provides the contract-call and HTTP fetch layers used by the
resolution services.
"""

from nft_viewer.clients.contract_client import ERC721_METADATA_ABI, ERC721Client
from nft_viewer.clients.http_client import MetadataFetcher, require_field

__all__ = [
    'ERC721_METADATA_ABI',
    'ERC721Client',
    'MetadataFetcher',
    'require_field',
]
