from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class SignedTransaction:
    raw_transaction: bytes
    hash: bytes
    r: int
    s: int
    v: int


class SigningDevice(ABC):
    """
    An external ECDSA signer that never reveals its private key.

    It signs a 32-byte digest and returns only r || s (64 bytes); it does not
    report the recovery id.
    """

    @abstractmethod
    def get_public_key(self) -> bytes:
        """Public key as 33, 64 or 65 bytes."""
        raise NotImplementedError

    @abstractmethod
    def sign_digest(self, digest32: bytes) -> bytes:
        raise NotImplementedError
