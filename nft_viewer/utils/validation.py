"""Validation utilities for NFT Viewer.

This module provides utilities for validating user-supplied contract
addresses and token identifiers.
"""

import re

from web3 import Web3

from nft_viewer.utils.errors import ValidationError

# 20-byte hex address, with or without mixed-case checksum
ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")

MAX_UINT256 = 2 ** 256 - 1


def validate_address(address: str) -> bool:
    """Check whether a string is a well-formed contract address.

    Args:
        address: The address to validate

    Returns:
        True if the address is valid, False otherwise
    """
    if not address or not isinstance(address, str):
        return False
    if not ADDRESS_PATTERN.match(address):
        return False
    # Mixed-case input must carry a correct EIP-55 checksum
    body = address[2:]
    if body.lower() != body and body.upper() != body:
        return Web3.is_checksum_address(address)
    return True


def to_checksum_address(address: str) -> str:
    """Validate an address and return its checksummed form.

    Args:
        address: The address to validate

    Returns:
        The EIP-55 checksummed address

    Raises:
        ValidationError: If the address is invalid
    """
    address = address.strip() if isinstance(address, str) else address
    if not validate_address(address):
        raise ValidationError(
            f"Invalid contract address: {address}",
            details={"address": address}
        )
    return Web3.to_checksum_address(address)


def validate_token_id(token_id: int) -> int:
    """Validate that a token id fits in an unsigned 256-bit integer.

    Raises:
        ValidationError: If the token id is out of range
    """
    if isinstance(token_id, bool) or not isinstance(token_id, int):
        raise ValidationError(
            f"Token id must be an integer: {token_id!r}",
            details={"token_id": repr(token_id)}
        )
    if token_id < 0 or token_id > MAX_UINT256:
        raise ValidationError(
            f"Token id out of range: {token_id}",
            details={"token_id": str(token_id)}
        )
    return token_id
