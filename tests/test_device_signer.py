import pytest
from eth_account import Account

from conftest import RECIPIENT, LocalKeyDevice
from signing.config import DeviceSignerConfig, device_config_from_env
from signing.device import ExternalDeviceSigner
from signing.errors import InvalidChainId, RecoveryIdNotFound
from signing.secp256k1 import SECP256K1_HALF_N, SECP256K1_N
from signing.transaction import transaction_hash


def _cfg(**overrides):
    base = dict(device_url=None, http_timeout_sec=10.0, enforce_low_s=True, allowed_chain_ids=set())
    base.update(overrides)
    return DeviceSignerConfig(**base)


class HighSDevice(LocalKeyDevice):
    """Returns the (still valid) high-s twin of every signature."""

    def sign_digest(self, digest32: bytes) -> bytes:
        sig = self.private_key.sign_msg_hash(digest32)
        return sig.r.to_bytes(32, "big") + (SECP256K1_N - sig.s).to_bytes(32, "big")


@pytest.mark.parametrize("key_format", ["compressed", "prefixed", "raw"])
def test_sign_transaction_recovers_to_device_address(private_key, transfer_tx, key_format):
    signer = ExternalDeviceSigner(LocalKeyDevice(private_key, key_format), _cfg())
    signed = signer.sign_transaction(transfer_tx, chain_id=130)

    assert signer.get_address() == private_key.public_key.to_checksum_address()
    assert Account.recover_transaction(signed.raw_transaction) == signer.get_address()
    assert signed.hash == transaction_hash(signed.raw_transaction)
    assert signed.v in (295, 296)


def test_sign_transaction_accepts_dict(device):
    signer = ExternalDeviceSigner(device, _cfg())
    signed = signer.sign_transaction(
        {"nonce": 0, "gasPrice": "0x4a817c800", "gas": 21000, "to": RECIPIENT, "value": 1},
        chain_id=11155111,
    )
    assert Account.recover_transaction(signed.raw_transaction) == signer.get_address()
    assert device.signed_digests and len(device.signed_digests[0]) == 32


def test_high_s_is_normalized_by_default(private_key, transfer_tx):
    signer = ExternalDeviceSigner(HighSDevice(private_key), _cfg())
    signed = signer.sign_transaction(transfer_tx, chain_id=130)
    assert signed.s <= SECP256K1_HALF_N
    assert Account.recover_transaction(signed.raw_transaction) == signer.get_address()


def test_high_s_kept_when_normalization_disabled(private_key, transfer_tx):
    signer = ExternalDeviceSigner(HighSDevice(private_key), _cfg(enforce_low_s=False))
    signed = signer.sign_transaction(transfer_tx, chain_id=130)
    assert signed.s > SECP256K1_HALF_N


def test_chain_allowlist(device, transfer_tx):
    signer = ExternalDeviceSigner(device, _cfg(allowed_chain_ids={130}))
    signer.sign_transaction(transfer_tx, chain_id=130)
    with pytest.raises(InvalidChainId):
        signer.sign_transaction(transfer_tx, chain_id=1)


def test_device_key_mismatch_raises(private_key, transfer_tx):
    class WrongKeyDevice(LocalKeyDevice):
        def get_public_key(self) -> bytes:
            return self.private_key.public_key.to_bytes()[::-1]

    signer = ExternalDeviceSigner(WrongKeyDevice(private_key), _cfg())
    with pytest.raises(RecoveryIdNotFound):
        signer.sign_transaction(transfer_tx, chain_id=130)


def test_device_config_from_env(monkeypatch):
    monkeypatch.setenv("SIGNER_DEVICE_URL", " http://card-bridge:8080 ")
    monkeypatch.setenv("HTTP_TIMEOUT_SEC", "2.5")
    monkeypatch.setenv("SIGNER_ENFORCE_LOW_S", "false")
    monkeypatch.setenv("SIGNER_ALLOWED_CHAIN_IDS", "130, 0xaa36a7, bogus")

    cfg = device_config_from_env()
    assert cfg.device_url == "http://card-bridge:8080"
    assert cfg.http_timeout_sec == 2.5
    assert cfg.enforce_low_s is False
    assert cfg.allowed_chain_ids == {130, 11155111}


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("130,0x", {130}),
        ("0X82, 0x", {130}),
        ("0130", {130}),
        ("1², 130", {130}),
        ("١٢, 1", {1}),
        ("0xzz, -1, 1.5", set()),
    ],
)
def test_device_config_skips_malformed_chain_ids(monkeypatch, raw, expected):
    monkeypatch.setenv("SIGNER_ALLOWED_CHAIN_IDS", raw)
    assert device_config_from_env().allowed_chain_ids == expected


def test_device_config_defaults(monkeypatch):
    for k in ("SIGNER_DEVICE_URL", "HTTP_TIMEOUT_SEC", "SIGNER_ENFORCE_LOW_S", "SIGNER_ALLOWED_CHAIN_IDS"):
        monkeypatch.delenv(k, raising=False)

    cfg = device_config_from_env()
    assert cfg.device_url is None
    assert cfg.http_timeout_sec == 10.0
    assert cfg.enforce_low_s is True
    assert cfg.allowed_chain_ids == set()
