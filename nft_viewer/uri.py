"""Content-addressed URI normalization.

Token and image URIs reported by contracts are frequently ``ipfs://``
references, which must be rewritten through an HTTP gateway before they can
be fetched.
"""

from nft_viewer.config import DEFAULT_IPFS_GATEWAY

IPFS_SCHEME = "ipfs://"


def resolve_uri(uri: str, gateway: str = DEFAULT_IPFS_GATEWAY) -> str:
    """Rewrite an ``ipfs://`` URI into a gateway URL.

    Any other URI is returned unchanged. The remainder after the scheme is
    not validated; malformed references surface later as fetch failures.

    Args:
        uri: The URI reported by a contract or metadata document
        gateway: Gateway base URL the remainder is appended to

    Returns:
        A fetchable URL
    """
    if uri.startswith(IPFS_SCHEME):
        return gateway + uri[len(IPFS_SCHEME):]
    return uri


class UriResolver:
    """Resolves token and image URIs against a fixed gateway."""

    def __init__(self, gateway: str = DEFAULT_IPFS_GATEWAY):
        self.gateway = gateway

    def resolve(self, uri: str) -> str:
        return resolve_uri(uri, self.gateway)
