from __future__ import annotations

from typing import Tuple

from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError

from observability import build_log_context, log_event

from .errors import InvalidMessageHash, InvalidSignatureLength, RecoveryIdNotFound
from .secp256k1 import SECP256K1_HALF_N, SECP256K1_N, normalize_public_key

SIGNATURE_LEN = 64
RECOVERY_IDS = (0, 1)

_CTX = build_log_context(component="recovery")


def split_signature(signature: bytes) -> Tuple[int, int]:
    """(r, s) as unsigned big-endian integers from a 64-byte r || s signature."""
    if len(signature) != SIGNATURE_LEN:
        raise InvalidSignatureLength(len(signature))
    return int.from_bytes(signature[:32], "big"), int.from_bytes(signature[32:], "big")


def normalize_signature(signature: bytes) -> bytes:
    """
    Return the low-s form of r || s (s <= n/2), as required by EIP-2.

    Flipping s flips the recovery id, so normalize before resolving it.
    """
    r, s = split_signature(signature)
    if s > SECP256K1_HALF_N:
        s = SECP256K1_N - s
    return r.to_bytes(32, "big") + s.to_bytes(32, "big")


def recover_public_key(message_hash: bytes, r: int, s: int, recovery_id: int) -> bytes:
    """
    64-byte public key recovered from (hash, r, s, recovery_id).

    Raises eth_keys' BadSignature/ValidationError when r or s is out of range or
    r is not the x coordinate of a curve point.
    """
    sig = keys.Signature(vrs=(recovery_id, r, s))
    return sig.recover_public_key_from_msg_hash(message_hash).to_bytes()


def find_recovery_id(message_hash: bytes, signature: bytes, expected_public_key: bytes) -> int:
    """
    Determine which recovery id (0 or 1) reproduces `expected_public_key`.

    Signing devices return only r || s; both candidate points are tried, 0 first,
    and the first whose recovered key equals the expected key wins.
    """
    r, s = split_signature(signature)
    if len(message_hash) != 32:
        raise InvalidMessageHash(len(message_hash))
    expected = normalize_public_key(expected_public_key)

    for recovery_id in RECOVERY_IDS:
        try:
            recovered = recover_public_key(message_hash, r, s, recovery_id)
        except (BadSignature, ValidationError, ValueError) as e:
            log_event(
                "recovery_attempt_failed",
                ctx=_CTX,
                data={"recovery_id": recovery_id, "error": str(e)},
                level="debug",
            )
            continue

        # All-zero output is the point at infinity, never a real key.
        if not any(recovered):
            continue

        if recovered == expected:
            log_event("recovery_id_found", ctx=_CTX, data={"recovery_id": recovery_id}, level="debug")
            return recovery_id

        log_event(
            "recovery_id_mismatch",
            ctx=_CTX,
            data={"recovery_id": recovery_id, "recovered": "0x" + recovered.hex()},
            level="debug",
        )

    log_event(
        "recovery_id_not_found",
        ctx=_CTX,
        data={"expected_public_key": "0x" + expected.hex()},
        level="warning",
    )
    raise RecoveryIdNotFound("0x" + expected.hex())
