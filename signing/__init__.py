from .addresses import (
    AddressValidationResult,
    is_valid_address_format,
    public_key_to_address,
    to_checksum_address,
    validate_address,
)
from .base import SignedTransaction, SigningDevice
from .config import DeviceSignerConfig, device_config_from_env
from .device import ExternalDeviceSigner
from .errors import (
    DeviceError,
    InvalidAddress,
    InvalidChainId,
    InvalidKeyLength,
    InvalidKeyPrefix,
    InvalidMessageHash,
    InvalidRecoveryId,
    InvalidSignatureLength,
    InvalidTransactionField,
    PointNotOnCurve,
    RecoveryIdNotFound,
    SigningError,
    UnsupportedKeyFormat,
)
from .recovery import find_recovery_id, normalize_signature
from .remote_device import RemoteSigningDevice
from .secp256k1 import decompress_public_key, normalize_public_key
from .transaction import (
    UnsignedTransaction,
    eip155_v,
    encode_signed_transaction,
    erc20_transfer_data,
    to_base_units,
    transaction_hash,
)

__all__ = [
    "AddressValidationResult",
    "DeviceError",
    "DeviceSignerConfig",
    "ExternalDeviceSigner",
    "InvalidAddress",
    "InvalidChainId",
    "InvalidKeyLength",
    "InvalidKeyPrefix",
    "InvalidMessageHash",
    "InvalidRecoveryId",
    "InvalidSignatureLength",
    "InvalidTransactionField",
    "PointNotOnCurve",
    "RecoveryIdNotFound",
    "RemoteSigningDevice",
    "SignedTransaction",
    "SigningDevice",
    "SigningError",
    "UnsignedTransaction",
    "decompress_public_key",
    "device_config_from_env",
    "eip155_v",
    "encode_signed_transaction",
    "erc20_transfer_data",
    "find_recovery_id",
    "is_valid_address_format",
    "normalize_public_key",
    "normalize_signature",
    "public_key_to_address",
    "to_base_units",
    "to_checksum_address",
    "transaction_hash",
    "validate_address",
]
