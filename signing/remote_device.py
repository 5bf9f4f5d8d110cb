from __future__ import annotations

import secrets
from typing import Optional

import requests
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature

from .base import SigningDevice
from .config import DeviceSignerConfig, device_config_from_env
from .errors import DeviceError


def _hex_to_bytes(value: object, *, field: str) -> bytes:
    s = str(value or "").strip()
    if s.startswith("0x"):
        s = s[2:]
    try:
        return bytes.fromhex(s)
    except ValueError:
        raise DeviceError(f"Signing device returned invalid hex in {field}", {"field": field}) from None


class RemoteSigningDevice(SigningDevice):
    """
    HTTP-backed signing device (HSM proxy, card bridge, MPC leader).

    Protocol (HTTP JSON):
    GET  {SIGNER_DEVICE_URL}/public_key   -> {"public_key": "0x..."}
    POST {SIGNER_DEVICE_URL}/sign_digest  body: {"digest_hex": "0x...", "session_id": "..."}
                                          -> {"ok": true, "signature_hex": "0x<r||s>"}
                                             or {"ok": true, "signature_der_hex": "0x..."}
    """

    def __init__(self, cfg: Optional[DeviceSignerConfig] = None) -> None:
        cfg = cfg or device_config_from_env()
        if not cfg.device_url:
            raise ValueError("SIGNER_DEVICE_URL environment variable not set")
        self._base_url = cfg.device_url.rstrip("/")
        self._timeout = cfg.http_timeout_sec

    def get_public_key(self) -> bytes:
        r = requests.get(f"{self._base_url}/public_key", timeout=self._timeout)
        r.raise_for_status()
        data = r.json()
        pub = _hex_to_bytes(data.get("public_key"), field="public_key")
        if not pub:
            raise DeviceError("Signing device returned empty public key")
        return pub

    def sign_digest(self, digest32: bytes, *, session_id: Optional[str] = None) -> bytes:
        payload = {"digest_hex": "0x" + digest32.hex(), "session_id": session_id or secrets.token_hex(12)}
        r = requests.post(f"{self._base_url}/sign_digest", json=payload, timeout=self._timeout)
        r.raise_for_status()
        data = r.json()
        if not data.get("ok"):
            raise DeviceError("Signing device refused to sign", {"response": data})

        if data.get("signature_hex"):
            sig = _hex_to_bytes(data["signature_hex"], field="signature_hex")
            if len(sig) != 64:
                raise DeviceError(
                    f"Signing device returned {len(sig)}-byte signature, expected 64",
                    {"length": len(sig)},
                )
            return sig

        if data.get("signature_der_hex"):
            der = _hex_to_bytes(data["signature_der_hex"], field="signature_der_hex")
            try:
                r_int, s_int = decode_dss_signature(der)
            except ValueError:
                raise DeviceError("Signing device returned malformed DER signature") from None
            if r_int >= 2**256 or s_int >= 2**256:
                raise DeviceError("Signing device returned out-of-range DER signature")
            return int(r_int).to_bytes(32, "big") + int(s_int).to_bytes(32, "big")

        raise DeviceError("Signing device did not return a signature", {"response": data})
