"""
Unit tests for account id validation in org.zion.sdk.strkey
"""

import pytest

from org.zion.sdk.strkey import (
    ENCODED_ACCOUNT_ID_LENGTH,
    VERSION_BYTE_ED25519_PUBLIC_KEY,
    crc16_xmodem,
    decode_check,
    encode_account_id,
    encode_check,
    is_valid_account_id,
)

from conftest import ZERO_ACCOUNT_ID, generate_account_id


class TestChecksum:
    def test_crc16_xmodem_known_value(self):
        """Test CRC16-XModem against the standard check value."""
        assert crc16_xmodem(b"123456789") == 0x31C3

    def test_crc16_xmodem_empty(self):
        assert crc16_xmodem(b"") == 0


class TestEncoding:
    def test_zero_key_encoding(self):
        """Test the all-zero public key encodes to the well known account id."""
        assert encode_account_id(bytes(32)) == ZERO_ACCOUNT_ID

    def test_encoded_length_and_prefix(self):
        account_id = generate_account_id(7)
        assert len(account_id) == ENCODED_ACCOUNT_ID_LENGTH
        assert account_id.startswith("G")

    def test_decode_returns_payload(self):
        key = bytes(range(32))
        encoded = encode_check(VERSION_BYTE_ED25519_PUBLIC_KEY, key)
        assert decode_check(VERSION_BYTE_ED25519_PUBLIC_KEY, encoded) == key

    def test_encode_rejects_wrong_length(self):
        with pytest.raises(ValueError):
            encode_account_id(b"short")


class TestIsValidAccountId:
    def test_valid_zero_key(self):
        assert is_valid_account_id(ZERO_ACCOUNT_ID) is True

    @pytest.mark.parametrize("seed", [1, 42, 255])
    def test_valid_generated_keys(self, seed):
        assert is_valid_account_id(generate_account_id(seed)) is True

    def test_bad_checksum(self):
        """Test changing the last character breaks the checksum."""
        account_id = generate_account_id(3)
        tampered = account_id[:-1] + ("A" if account_id[-1] != "A" else "B")
        assert is_valid_account_id(tampered) is False

    def test_wrong_version_byte(self):
        """Test a seed-style strkey (S prefix) is not an account id."""
        seed = encode_check(18 << 3, bytes(32))
        assert seed.startswith("S")
        assert is_valid_account_id(seed) is False

    def test_lowercase_rejected(self):
        assert is_valid_account_id(ZERO_ACCOUNT_ID.lower()) is False

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "G",
            "bob",
            "GAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAWH",
            "GAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAWHF1",
            "GAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAWH!",
            None,
        ],
    )
    def test_malformed_values(self, value):
        assert is_valid_account_id(value) is False
