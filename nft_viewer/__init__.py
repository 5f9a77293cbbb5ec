"""NFT Viewer Package.

This package resolves ERC-721 collection and token metadata from an
on-chain registry contract, normalizes IPFS references through a gateway,
and renders or saves the token images.
"""

__version__ = "0.1.0"
__author__ = "NFT Viewer Contributors"
__email__ = "maintainers@nft-viewer.dev"
