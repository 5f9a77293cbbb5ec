"""Data models for NFT Viewer."""

from nft_viewer.models.nft import Attribute, BatchItemResult, CollectionMetadata, TokenMetadata

__all__ = [
    'Attribute',
    'BatchItemResult',
    'CollectionMetadata',
    'TokenMetadata',
]
