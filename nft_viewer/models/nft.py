"""
NFT data models for NFT Viewer.

This module defines Pydantic models for collection and token metadata, and
the per-item result type produced by batch downloads.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from nft_viewer.utils.errors import NFTViewerError


class CollectionMetadata(BaseModel):
    """
    Model for collection-level contract metadata.

    Unreadable fields hold their zero value rather than None.
    """
    model_config = ConfigDict(frozen=True)

    name: str = ""
    symbol: str = ""
    base_uri: str = ""
    total_supply: int = Field(default=0, ge=0)


class Attribute(BaseModel):
    """
    Model for a single trait attribute of a token.
    """
    model_config = ConfigDict(frozen=True)

    trait_type: str
    value: str


class TokenMetadata(BaseModel):
    """
    Model for a resolved token.

    ``attributes`` keeps the order of the source metadata document.
    """
    model_config = ConfigDict(frozen=True)

    token_id: str
    token_uri: str
    image_uri: str
    attributes: Tuple[Attribute, ...] = ()

    @property
    def attribute_pairs(self) -> Tuple[Tuple[str, str], ...]:
        """Get the attributes as (trait_type, value) pairs."""
        return tuple((a.trait_type, a.value) for a in self.attributes)


@dataclass(frozen=True)
class BatchItemResult:
    """Outcome of downloading a single token in a batch."""

    token_id: int
    path: Optional[Path] = None
    error: Optional[NFTViewerError] = None

    @property
    def ok(self) -> bool:
        return self.error is None
