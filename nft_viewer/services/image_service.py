"""
Image service for NFT Viewer.

This module fetches token images, decodes them by sniffing their content,
and either draws them on a display surface or writes them to disk.
"""

import asyncio
import io
import logging
from pathlib import Path
from typing import Optional, Protocol, Union

from PIL import Image, UnidentifiedImageError

from nft_viewer.clients.http_client import MetadataFetcher
from nft_viewer.display.terminal import TerminalSurface
from nft_viewer.services.base_service import BaseService
from nft_viewer.uri import UriResolver
from nft_viewer.utils.errors import DecodeError, StorageError

logger = logging.getLogger(__name__)

# Layout of a rendered image below the token tables, in character cells
IMAGE_X = 1
IMAGE_BASE_Y = 36
IMAGE_ROWS_PER_ATTRIBUTE = 1.4
IMAGE_WIDTH = 80
IMAGE_HEIGHT = 40


class DisplaySurface(Protocol):
    """Anything that can draw a decoded image at a cell offset."""

    def draw(self, image: Image.Image, x: int, y: int, width: int, height: int) -> None:
        ...


def image_offset(attribute_count: int) -> int:
    """Vertical offset of the rendered image for a given attribute count."""
    return IMAGE_BASE_Y + round(attribute_count * IMAGE_ROWS_PER_ATTRIBUTE)


def decode_image(data: bytes, url: str) -> Image.Image:
    """
    Decode raw bytes into an image, detecting the format from the content.

    Args:
        data: Raw response body
        url: Source URL, used for error reporting only

    Returns:
        A fully loaded PIL image

    Raises:
        DecodeError: If the bytes are not a recognized image
    """
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except UnidentifiedImageError as e:
        raise DecodeError(f"Unrecognized image format from {url}", url=url) from e
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Could not decode image from {url}: {str(e)}", url=url) from e
    return image


def write_image(image: Image.Image, destination: Path) -> None:
    """
    Write an image in the format implied by the destination extension.

    Raises:
        StorageError: If the directory or file cannot be written
    """
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        if image.mode == "CMYK":
            image = image.convert("RGB")
        image.save(destination)
    except (OSError, ValueError) as e:
        raise StorageError(f"Could not save image to {destination}: {str(e)}", path=str(destination)) from e


class ImageMaterializer(BaseService):
    """Service for fetching, rendering and saving token images."""

    def __init__(
        self,
        fetcher: MetadataFetcher,
        uri_resolver: Optional[UriResolver] = None,
        surface: Optional[DisplaySurface] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the image materializer.

        Args:
            fetcher: HTTP fetcher for image bytes
            uri_resolver: Resolver for ipfs:// references
            surface: Display surface used by render(); created lazily if omitted
            logger: Optional logger instance
        """
        super().__init__(logger=logger)
        self.fetcher = fetcher
        self.uri_resolver = uri_resolver or UriResolver(fetcher.config.ipfs_gateway)
        self._surface = surface

    @property
    def surface(self) -> DisplaySurface:
        if self._surface is None:
            self._surface = TerminalSurface()
        return self._surface

    async def load(self, image_uri: str) -> Image.Image:
        """
        Resolve, fetch and decode an image. Never cached.

        Raises:
            FetchError: If the image cannot be retrieved
            DecodeError: If the bytes are not a recognized image
        """
        url = self.uri_resolver.resolve(image_uri)
        data = await self.fetcher.fetch_bytes(url)
        image = await asyncio.to_thread(decode_image, data, url)
        self.logger.debug(f"Decoded {image.format} {image.size} from {url}")
        return image

    async def render(self, image_uri: str, attribute_count: int) -> None:
        """
        Draw an image on the display surface below the token tables.

        Args:
            image_uri: The token's image reference
            attribute_count: Number of attributes printed above the image
        """
        image = await self.load(image_uri)
        try:
            self.surface.draw(
                image,
                x=IMAGE_X,
                y=image_offset(attribute_count),
                width=IMAGE_WIDTH,
                height=IMAGE_HEIGHT
            )
        finally:
            image.close()

    async def save(self, image_uri: str, destination: Union[str, Path]) -> Path:
        """
        Fetch an image and write it to ``destination``.

        Args:
            image_uri: The token's image reference
            destination: Output file; its extension selects the format

        Returns:
            The path written

        Raises:
            FetchError: If the image cannot be retrieved
            DecodeError: If the bytes are not a recognized image
            StorageError: If the file cannot be written
        """
        destination = Path(destination)
        image = await self.load(image_uri)
        try:
            await asyncio.to_thread(write_image, image, destination)
        finally:
            image.close()
        self.logger.info(f"Saved {image_uri} to {destination}")
        return destination
