"""Resolution services for NFT Viewer.

This package provides the collection, token, image and batch stages of the
resolution pipeline.
"""

from nft_viewer.services.base_service import BaseService
from nft_viewer.services.batch_service import BatchIterator, FailurePolicy, token_path
from nft_viewer.services.collection_service import CollectionResolver
from nft_viewer.services.image_service import ImageMaterializer, image_offset
from nft_viewer.services.token_service import TokenResolver

__all__ = [
    'BaseService',
    'BatchIterator',
    'CollectionResolver',
    'FailurePolicy',
    'ImageMaterializer',
    'TokenResolver',
    'image_offset',
    'token_path',
]
