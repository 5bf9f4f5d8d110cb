from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(eq=False)
class SigningError(Exception):
    """
    Base error for transaction assembly.

    `code` is stable and safe to branch on; `message` is for humans.
    """

    code: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message


class InvalidSignatureLength(SigningError, ValueError):
    def __init__(self, length: int) -> None:
        super().__init__(
            "invalid_signature_length",
            f"Expected 64-byte signature (r || s), got {length} bytes",
            {"length": length},
        )


class InvalidMessageHash(SigningError, ValueError):
    def __init__(self, length: int) -> None:
        super().__init__(
            "invalid_message_hash",
            f"Message hash must be 32 bytes, got {length}",
            {"length": length},
        )


class InvalidKeyLength(SigningError, ValueError):
    def __init__(self, length: int) -> None:
        super().__init__(
            "invalid_key_length",
            f"Compressed public key must be 33 bytes, got {length}",
            {"length": length},
        )


class InvalidKeyPrefix(SigningError, ValueError):
    def __init__(self, prefix: int) -> None:
        super().__init__(
            "invalid_key_prefix",
            f"Invalid compressed public key prefix: 0x{prefix:02x} (expected 0x02 or 0x03)",
            {"prefix": prefix},
        )


class PointNotOnCurve(SigningError, ValueError):
    def __init__(self, x_hex: str) -> None:
        super().__init__(
            "point_not_on_curve",
            "X coordinate is not on the secp256k1 curve",
            {"x": x_hex},
        )


class UnsupportedKeyFormat(SigningError, ValueError):
    def __init__(self, length: int, prefix: int | None) -> None:
        super().__init__(
            "unsupported_key_format",
            f"Unsupported public key format: {length} bytes"
            + (f", prefix 0x{prefix:02x}" if prefix is not None else ""),
            {"length": length, "prefix": prefix},
        )


class RecoveryIdNotFound(SigningError, RuntimeError):
    def __init__(self, expected_public_key_hex: str) -> None:
        super().__init__(
            "recovery_id_not_found",
            "Could not determine correct recovery ID. "
            "The signature may not match the expected public key.",
            {"expected_public_key": expected_public_key_hex},
        )


class InvalidRecoveryId(SigningError, ValueError):
    def __init__(self, recovery_id: Any) -> None:
        super().__init__(
            "invalid_recovery_id",
            f"Recovery ID must be 0 or 1, got {recovery_id!r}",
            {"recovery_id": recovery_id},
        )


class InvalidChainId(SigningError, ValueError):
    def __init__(self, chain_id: Any, reason: str = "chain_id must be a non-negative integer") -> None:
        super().__init__("invalid_chain_id", f"{reason}: {chain_id!r}", {"chain_id": chain_id})


class InvalidTransactionField(SigningError, ValueError):
    def __init__(self, name: str, reason: str) -> None:
        super().__init__("invalid_transaction_field", f"Invalid tx field {name}: {reason}", {"field": name})


class InvalidAddress(SigningError, ValueError):
    def __init__(self, address: Any, reason: str) -> None:
        super().__init__("invalid_address", f"{reason}: {address!r}", {"address": str(address)})


class DeviceError(SigningError):
    def __init__(self, message: str, data: Dict[str, Any] | None = None) -> None:
        super().__init__("device_error", message, data or {})
