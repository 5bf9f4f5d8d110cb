import os
import sys

import pytest
from eth_keys import keys

# Add project root to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from signing.base import SigningDevice
from signing.transaction import UnsignedTransaction

TEST_PRIVATE_KEY = bytes.fromhex("4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318")
RECIPIENT = "0x742d35Cc6634C0532925a3b844Bc454e4438f44e"


class LocalKeyDevice(SigningDevice):
    """In-process stand-in for a card/HSM: signs digests, returns only r || s."""

    def __init__(self, private_key: keys.PrivateKey, public_key_format: str = "compressed"):
        self.private_key = private_key
        self.public_key_format = public_key_format
        self.signed_digests = []

    def get_public_key(self) -> bytes:
        pub = self.private_key.public_key
        if self.public_key_format == "compressed":
            return pub.to_compressed_bytes()
        if self.public_key_format == "prefixed":
            return b"\x04" + pub.to_bytes()
        return pub.to_bytes()

    def sign_digest(self, digest32: bytes) -> bytes:
        self.signed_digests.append(digest32)
        return self.private_key.sign_msg_hash(digest32).to_bytes()[:64]


@pytest.fixture
def private_key():
    return keys.PrivateKey(TEST_PRIVATE_KEY)


@pytest.fixture
def device(private_key):
    return LocalKeyDevice(private_key)


@pytest.fixture
def transfer_tx():
    return UnsignedTransaction(
        nonce=1,
        gas_price=20_000_000_000,
        gas_limit=21_000,
        to=bytes.fromhex(RECIPIENT[2:]),
        value=10**18,
    )
