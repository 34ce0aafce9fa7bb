"""Validation of textual Zion account ids (strkeys).

An account id is the base32 encoding of a version byte, a 32 byte ed25519 public key
and a little-endian CRC16-XModem checksum over the first two, which gives a 56
character string starting with ``G``.
"""

import base64
import binascii
import struct
from typing import Optional

VERSION_BYTE_ED25519_PUBLIC_KEY = 6 << 3
ED25519_PUBLIC_KEY_LENGTH = 32
ENCODED_ACCOUNT_ID_LENGTH = 56


def crc16_xmodem(data: bytes) -> int:
    # crc_hqx with a zero seed is CRC16-XModem
    return binascii.crc_hqx(data, 0)


def decode_check(version_byte: int, encoded: str) -> Optional[bytes]:
    """Decode a strkey of the given version, returning the payload or None if invalid."""
    if not encoded.isascii() or encoded != encoded.upper():
        return None
    try:
        decoded = base64.b32decode(encoded)
    except (binascii.Error, ValueError):
        return None

    if len(decoded) < 3 or decoded[0] != version_byte:
        return None

    # The encoding must be canonical, otherwise two strings map to one key
    if base64.b32encode(decoded).decode("ascii") != encoded:
        return None

    payload, checksum = decoded[:-2], decoded[-2:]
    expected = struct.pack("<H", crc16_xmodem(payload))
    if checksum != expected:
        return None
    return payload[1:]


def encode_check(version_byte: int, data: bytes) -> str:
    payload = bytes([version_byte]) + data
    checksum = struct.pack("<H", crc16_xmodem(payload))
    return base64.b32encode(payload + checksum).decode("ascii")


def encode_account_id(public_key: bytes) -> str:
    """Encode a raw ed25519 public key as an account id."""
    if len(public_key) != ED25519_PUBLIC_KEY_LENGTH:
        raise ValueError(
            f"ed25519 public key must be {ED25519_PUBLIC_KEY_LENGTH} bytes, got {len(public_key)}"
        )
    return encode_check(VERSION_BYTE_ED25519_PUBLIC_KEY, public_key)


def is_valid_account_id(value: Optional[str]) -> bool:
    """Check whether value is a syntactically valid account id.

    This does not check that the account exists on the ledger.
    """
    if not isinstance(value, str) or len(value) != ENCODED_ACCOUNT_ID_LENGTH:
        return False
    decoded = decode_check(VERSION_BYTE_ED25519_PUBLIC_KEY, value)
    return decoded is not None and len(decoded) == ED25519_PUBLIC_KEY_LENGTH
