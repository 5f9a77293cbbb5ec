"""Terminal output for NFT Viewer."""

from nft_viewer.display.terminal import TerminalSurface
from nft_viewer.display.viewer import Viewer

__all__ = [
    'TerminalSurface',
    'Viewer',
]
