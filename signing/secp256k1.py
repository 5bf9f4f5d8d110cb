from __future__ import annotations

from .errors import InvalidKeyLength, InvalidKeyPrefix, PointNotOnCurve, UnsupportedKeyFormat

# Field prime and group order of secp256k1.
SECP256K1_P = 2**256 - 2**32 - 977
SECP256K1_N = int(
    "0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141",
    16,
)
SECP256K1_HALF_N = SECP256K1_N // 2
SECP256K1_B = 7

COMPRESSED_KEY_LEN = 33
UNCOMPRESSED_KEY_LEN = 65
RAW_KEY_LEN = 64


def decompress_public_key(compressed: bytes) -> bytes:
    """
    Expand a 33-byte SEC1 compressed key (0x02/0x03 || X) into the 64-byte X || Y form.

    Y is the square root of X^3 + 7 mod p. Since p = 3 mod 4 the root is
    (X^3 + 7)^((p + 1) / 4); the prefix selects the root with matching parity.
    """
    if len(compressed) != COMPRESSED_KEY_LEN:
        raise InvalidKeyLength(len(compressed))

    prefix = compressed[0]
    if prefix not in (0x02, 0x03):
        raise InvalidKeyPrefix(prefix)

    x = int.from_bytes(compressed[1:], "big")
    if x >= SECP256K1_P:
        raise PointNotOnCurve(compressed[1:].hex())

    alpha = (pow(x, 3, SECP256K1_P) + SECP256K1_B) % SECP256K1_P
    y = pow(alpha, (SECP256K1_P + 1) // 4, SECP256K1_P)
    if (y * y) % SECP256K1_P != alpha:
        raise PointNotOnCurve(compressed[1:].hex())

    if (y & 1) != (prefix & 1):
        y = SECP256K1_P - y

    return x.to_bytes(32, "big") + y.to_bytes(32, "big")


def normalize_public_key(public_key: bytes) -> bytes:
    """
    Return the canonical 64-byte X || Y form of a public key given as
    64 raw bytes, 65 bytes with the 0x04 prefix, or 33 compressed bytes.
    """
    size = len(public_key)
    prefix = public_key[0] if size else None

    if size == RAW_KEY_LEN:
        return bytes(public_key)
    if size == UNCOMPRESSED_KEY_LEN and prefix == 0x04:
        return bytes(public_key[1:])
    if size == COMPRESSED_KEY_LEN and prefix in (0x02, 0x03):
        return decompress_public_key(public_key)
    raise UnsupportedKeyFormat(size, prefix)
