from __future__ import annotations

from typing import Any, Dict, Optional, Union

from observability import build_log_context, log_event

from .addresses import public_key_to_address
from .base import SignedTransaction, SigningDevice
from .config import DeviceSignerConfig, device_config_from_env
from .errors import InvalidChainId
from .recovery import find_recovery_id, normalize_signature, split_signature
from .secp256k1 import normalize_public_key
from .transaction import UnsignedTransaction, eip155_v, encode_signed_transaction, transaction_hash


class ExternalDeviceSigner:
    """
    Assemble signed legacy transactions from a device that only returns r || s.

    Flow: signing hash -> device signature -> (low-s) -> recovery id -> RLP.
    """

    def __init__(self, device: SigningDevice, cfg: Optional[DeviceSignerConfig] = None) -> None:
        self._device = device
        self._cfg = cfg or device_config_from_env()
        self._public_key: Optional[bytes] = None
        self._ctx = build_log_context(component="device_signer", device=type(device).__name__)

    def get_public_key(self) -> bytes:
        if self._public_key is None:
            self._public_key = normalize_public_key(self._device.get_public_key())
        return self._public_key

    def get_address(self) -> str:
        return public_key_to_address(self.get_public_key())

    def sign_transaction(
        self,
        tx: Union[UnsignedTransaction, Dict[str, Any]],
        *,
        chain_id: int,
    ) -> SignedTransaction:
        unsigned = tx if isinstance(tx, UnsignedTransaction) else UnsignedTransaction.from_dict(tx)

        if self._cfg.allowed_chain_ids and chain_id not in self._cfg.allowed_chain_ids:
            raise InvalidChainId(chain_id, "chain_id is not allowlisted for this signer")

        digest = unsigned.signing_hash(chain_id)
        log_event("device_sign_requested", ctx=self._ctx, data={"chain_id": chain_id, "digest": "0x" + digest.hex()})

        signature = self._device.sign_digest(digest)
        if self._cfg.enforce_low_s:
            signature = normalize_signature(signature)

        recovery_id = find_recovery_id(digest, signature, self.get_public_key())
        raw = encode_signed_transaction(unsigned, signature, recovery_id, chain_id)
        r, s = split_signature(signature)
        tx_hash = transaction_hash(raw)

        log_event(
            "device_tx_signed",
            ctx=self._ctx,
            data={"chain_id": chain_id, "recovery_id": recovery_id, "hash": "0x" + tx_hash.hex()},
        )
        return SignedTransaction(
            raw_transaction=raw,
            hash=tx_hash,
            r=r,
            s=s,
            v=eip155_v(chain_id, recovery_id),
        )
