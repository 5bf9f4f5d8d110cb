from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Set

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _parse_int_set(value: Optional[str]) -> Set[int]:
    out: Set[int] = set()
    if not value:
        return out
    for part in value.split(","):
        s = part.strip()
        if not s:
            continue
        # Support decimal and 0x-prefixed hex.
        is_hex = len(s) > 2 and s.lower().startswith("0x") and all(c in "0123456789abcdef" for c in s[2:].lower())
        is_dec = s.isascii() and s.isdecimal()
        if not (is_hex or is_dec):
            continue
        out.add(int(s[2:], 16) if is_hex else int(s, 10))
    return out


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_str(name: str) -> Optional[str]:
    v = os.getenv(name)
    if v is None:
        return None
    v = v.strip()
    return v or None


@dataclass(frozen=True)
class DeviceSignerConfig:
    device_url: Optional[str]
    http_timeout_sec: float
    enforce_low_s: bool
    allowed_chain_ids: Set[int]


def device_config_from_env() -> DeviceSignerConfig:
    """
    Config for the device-backed signer.

    Env:
    - SIGNER_DEVICE_URL: base URL of the remote signing device (remote device only)
    - HTTP_TIMEOUT_SEC: request timeout (default 10)
    - SIGNER_ENFORCE_LOW_S: normalize device signatures to low-s (default true)
    - SIGNER_ALLOWED_CHAIN_IDS: optional comma list; other chain ids are refused
    """
    return DeviceSignerConfig(
        device_url=_env_str("SIGNER_DEVICE_URL"),
        http_timeout_sec=_env_float("HTTP_TIMEOUT_SEC", 10.0),
        enforce_low_s=_env_bool("SIGNER_ENFORCE_LOW_S", True),
        allowed_chain_ids=_parse_int_set(os.getenv("SIGNER_ALLOWED_CHAIN_IDS")),
    )
