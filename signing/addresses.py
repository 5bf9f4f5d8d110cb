from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from eth_utils import keccak
from eth_utils import to_checksum_address as _eth_to_checksum_address

from .errors import InvalidAddress
from .secp256k1 import normalize_public_key

_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")


@dataclass(frozen=True)
class AddressValidationResult:
    is_valid: bool
    error: Optional[str] = None
    checksum_address: Optional[str] = None
    suggested_address: Optional[str] = None


def to_checksum_address(address: str) -> str:
    """EIP-55 mixed-case form of a 0x-prefixed hex address."""
    if not is_valid_address_format(address):
        raise InvalidAddress(address, "Address must be 0x followed by 40 hex digits")
    return _eth_to_checksum_address(address.lower())


def is_valid_address_format(address: str) -> bool:
    return bool(_ADDRESS_RE.match(address or ""))


def validate_address(address: str) -> AddressValidationResult:
    """
    Check format and, for mixed-case input, the EIP-55 checksum.

    All-lowercase and all-uppercase hex carry no checksum and are accepted.
    """
    if not address or not address.strip():
        return AddressValidationResult(is_valid=False, error="Address is empty")
    if not (address.startswith("0x") or address.startswith("0X")):
        return AddressValidationResult(is_valid=False, error="Address must start with 0x")
    if len(address) != 42:
        return AddressValidationResult(
            is_valid=False,
            error="Address must be 42 characters (0x + 40 hex digits)",
        )

    hex_part = address[2:]
    if not all(c in "0123456789abcdefABCDEF" for c in hex_part):
        return AddressValidationResult(is_valid=False, error="Address contains invalid characters")

    checksum = _eth_to_checksum_address("0x" + hex_part.lower())
    mixed_case = hex_part != hex_part.lower() and hex_part != hex_part.upper()
    if mixed_case and "0x" + hex_part != checksum:
        return AddressValidationResult(
            is_valid=False,
            error=f"Invalid address checksum. Did you mean: {checksum}",
            suggested_address=checksum,
        )

    return AddressValidationResult(is_valid=True, checksum_address=checksum)


def address_to_bytes(address: str | bytes) -> bytes:
    """20 raw bytes for a hex address string (checksum not enforced) or pass-through bytes."""
    if isinstance(address, (bytes, bytearray)):
        raw = bytes(address)
    elif isinstance(address, str):
        s = address.strip()
        if s[:2].lower() == "0x":
            s = s[2:]
        try:
            raw = bytes.fromhex(s)
        except ValueError:
            raise InvalidAddress(address, "Address is not valid hex") from None
    else:
        raise InvalidAddress(address, f"Address must be hex string or bytes, not {type(address).__name__}")

    if len(raw) != 20:
        raise InvalidAddress(address, f"Address must be 20 bytes, got {len(raw)}")
    return raw


def public_key_to_address(public_key: bytes) -> str:
    """
    Ethereum address of a public key in any supported encoding:
    the last 20 bytes of keccak256(X || Y), EIP-55 checksummed.
    """
    digest = keccak(normalize_public_key(public_key))
    return _eth_to_checksum_address("0x" + digest[-20:].hex())
