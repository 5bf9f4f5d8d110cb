from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Union

import rlp
from eth_abi import encode as abi_encode
from eth_utils import function_signature_to_4byte_selector, keccak

from observability import build_log_context, log_event

from .addresses import address_to_bytes
from .errors import InvalidChainId, InvalidRecoveryId, InvalidTransactionField
from .recovery import RECOVERY_IDS, split_signature

# EIP-155: v = chain_id * 2 + 35 + recovery_id
CHAIN_ID_OFFSET = 35

NATIVE_TRANSFER_GAS = 21_000
ERC20_TRANSFER_SELECTOR = function_signature_to_4byte_selector("transfer(address,uint256)")
UINT256_MAX = 2**256 - 1

_CTX = build_log_context(component="transaction")


def _rlp_int(i: int) -> bytes:
    # RLP integers are big-endian with no leading zero bytes; zero is the empty string.
    if i == 0:
        return b""
    return int(i).to_bytes((int(i).bit_length() + 7) // 8, "big")


def _to_int(v: Any, *, name: str) -> int:
    if v is None:
        raise InvalidTransactionField(name, "missing")
    if isinstance(v, bool):
        raise InvalidTransactionField(name, f"not an integer: {v}")
    if isinstance(v, int):
        return v
    if isinstance(v, str):
        s = v.strip().lower()
        try:
            if s.startswith("0x"):
                return int(s, 16)
            return int(s, 10)
        except ValueError:
            raise InvalidTransactionField(name, f"not an integer: {v!r}") from None
    raise InvalidTransactionField(name, f"unsupported type {type(v).__name__}")


def _to_bytes(v: Any, *, name: str) -> bytes:
    if v is None:
        return b""
    if isinstance(v, (bytes, bytearray)):
        return bytes(v)
    if isinstance(v, str):
        s = v.strip()
        if s.startswith("0x"):
            s = s[2:]
        if s == "":
            return b""
        try:
            return bytes.fromhex(s)
        except ValueError:
            raise InvalidTransactionField(name, "not valid hex") from None
    raise InvalidTransactionField(name, f"unsupported type {type(v).__name__}")


def to_base_units(amount: Union[Decimal, str, int], decimals: int) -> int:
    """
    Scale a human amount ("1.5" USDC, decimals=6) to the token's smallest unit.

    Amounts with more fractional digits than `decimals` are rejected rather than rounded.
    """
    if isinstance(amount, (bool, float)):
        raise InvalidTransactionField("amount", f"unsupported type {type(amount).__name__}")
    try:
        d = Decimal(amount)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidTransactionField("amount", f"not a number: {amount!r}") from None
    if not d.is_finite() or d < 0:
        raise InvalidTransactionField("amount", "must be a non-negative finite number")
    scaled = d.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise InvalidTransactionField("amount", f"more than {decimals} decimal places")
    return int(scaled)


def erc20_transfer_data(to: Union[str, bytes], amount: int) -> bytes:
    """ABI call data for `transfer(address,uint256)`."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidTransactionField("amount", f"expected int, got {type(amount).__name__}")
    if amount < 0 or amount > UINT256_MAX:
        raise InvalidTransactionField("amount", "out of uint256 range")
    return ERC20_TRANSFER_SELECTOR + abi_encode(["address", "uint256"], [address_to_bytes(to), amount])


@dataclass(frozen=True)
class UnsignedTransaction:
    """
    Legacy (type 0) transaction fields, before signing.
    """

    nonce: int
    gas_price: int
    gas_limit: int
    to: bytes
    value: int = 0
    data: bytes = b""

    def __post_init__(self) -> None:
        for name in ("nonce", "gas_price", "gas_limit", "value"):
            v = getattr(self, name)
            if isinstance(v, bool) or not isinstance(v, int):
                raise InvalidTransactionField(name, f"expected int, got {type(v).__name__}")
            if v < 0:
                raise InvalidTransactionField(name, "must be non-negative")
        if not isinstance(self.to, bytes) or len(self.to) != 20:
            raise InvalidTransactionField("to", "must be 20 bytes")
        if not isinstance(self.data, bytes):
            raise InvalidTransactionField("data", f"expected bytes, got {type(self.data).__name__}")

    @classmethod
    def from_dict(cls, tx: Dict[str, Any]) -> "UnsignedTransaction":
        """
        Build from a Web3-style dict: nonce, gasPrice, gas (or gasLimit), to, value, data.
        """
        gas = tx.get("gas") if tx.get("gas") is not None else tx.get("gasLimit")
        to = tx.get("to")
        if to is None or to == "":
            raise InvalidTransactionField("to", "missing")
        return cls(
            nonce=_to_int(tx.get("nonce"), name="nonce"),
            gas_price=_to_int(tx.get("gasPrice"), name="gasPrice"),
            gas_limit=_to_int(gas, name="gas"),
            to=address_to_bytes(to),
            value=_to_int(tx.get("value", 0), name="value"),
            data=_to_bytes(tx.get("data", b""), name="data"),
        )

    @classmethod
    def native_transfer(
        cls,
        to: Union[str, bytes],
        value: int,
        *,
        nonce: int,
        gas_price: int,
        gas_limit: int = NATIVE_TRANSFER_GAS,
    ) -> "UnsignedTransaction":
        """Plain transfer of `value` wei to `to`."""
        return cls(
            nonce=nonce,
            gas_price=gas_price,
            gas_limit=gas_limit,
            to=address_to_bytes(to),
            value=value,
        )

    @classmethod
    def erc20_transfer(
        cls,
        token: Union[str, bytes],
        to: Union[str, bytes],
        amount: int,
        *,
        nonce: int,
        gas_price: int,
        gas_limit: int,
    ) -> "UnsignedTransaction":
        """
        Call `transfer(to, amount)` on the ERC-20 contract at `token`.

        `amount` is in the token's smallest unit (see `to_base_units`); the
        transaction itself carries no native value.
        """
        return cls(
            nonce=nonce,
            gas_price=gas_price,
            gas_limit=gas_limit,
            to=address_to_bytes(token),
            value=0,
            data=erc20_transfer_data(to, amount),
        )

    def _fields(self) -> List[bytes]:
        return [
            _rlp_int(self.nonce),
            _rlp_int(self.gas_price),
            _rlp_int(self.gas_limit),
            self.to,
            _rlp_int(self.value),
            self.data,
        ]

    def signing_payload(self, chain_id: int) -> bytes:
        """EIP-155 pre-image: rlp([nonce, gasPrice, gas, to, value, data, chainId, 0, 0])."""
        _check_chain_id(chain_id)
        return rlp.encode(self._fields() + [_rlp_int(chain_id), b"", b""])

    def signing_hash(self, chain_id: int) -> bytes:
        """The 32-byte digest a signing device must sign for `chain_id`."""
        return keccak(self.signing_payload(chain_id))


def _check_chain_id(chain_id: Any) -> None:
    if isinstance(chain_id, bool) or not isinstance(chain_id, int) or chain_id < 0:
        raise InvalidChainId(chain_id)


def eip155_v(chain_id: int, recovery_id: int) -> int:
    _check_chain_id(chain_id)
    if isinstance(recovery_id, bool) or not isinstance(recovery_id, int) or recovery_id not in RECOVERY_IDS:
        raise InvalidRecoveryId(recovery_id)
    return chain_id * 2 + CHAIN_ID_OFFSET + recovery_id


def encode_signed_transaction(
    tx: UnsignedTransaction,
    signature: bytes,
    recovery_id: int,
    chain_id: int,
) -> bytes:
    """
    RLP-encode a legacy transaction with an external r || s signature.

    Produces [nonce, gasPrice, gas, to, value, data, v, r, s] with the EIP-155 v,
    byte-identical to what standard clients emit for the same signature.
    """
    r, s = split_signature(signature)
    v = eip155_v(chain_id, recovery_id)

    encoded = rlp.encode(tx._fields() + [_rlp_int(v), _rlp_int(r), _rlp_int(s)])
    log_event(
        "signed_tx_encoded",
        ctx=_CTX,
        data={"chain_id": chain_id, "recovery_id": recovery_id, "v": v, "length": len(encoded)},
        level="debug",
    )
    return encoded


def transaction_hash(raw_transaction: bytes) -> bytes:
    """Hash under which nodes index the signed transaction."""
    return keccak(raw_transaction)
