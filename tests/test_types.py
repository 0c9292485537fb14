"""Unit tests for the domain value types."""

from __future__ import annotations

from decimal import Decimal

import pytest

from nomisma.canon.types import (
    EARLIEST,
    LATEST_MINED,
    LATEST_STATE,
    drip_from_cfx,
    drip_from_gdrip,
    to_address,
    to_block_hash,
    to_drip,
    to_epoch,
    to_private_key,
    to_tx_hash,
)
from nomisma.errors import FormatError

ADDRESS = "0xbbd9e9be525ab967e633bcdaeac8bd5723ed4d6b"
KEY = "0xa816a06117e572ca7ae2f786a046d2bc478051d0717bf5cc4f5397923258d393"
HASH = "0x0123456789012345678901234567890123456789012345678901234567890123"


class TestFixedLength:
    """Address, private key and hashes enforce their byte length."""

    def test_address(self) -> None:
        assert to_address(ADDRESS) == ADDRESS
        assert to_address(ADDRESS.upper().replace("0X", "0x")) == ADDRESS
        assert to_address(ADDRESS[2:]) == ADDRESS
        assert to_address(bytes.fromhex(ADDRESS[2:])) == ADDRESS

    def test_private_key(self) -> None:
        assert to_private_key(KEY) == KEY
        assert to_private_key(KEY.upper()) == KEY
        assert to_private_key(KEY[2:]) == KEY

    def test_hashes(self) -> None:
        assert to_block_hash(HASH[2:]) == HASH
        assert to_tx_hash(HASH) == HASH

    def test_wrong_length(self) -> None:
        with pytest.raises(FormatError, match="do not match BlockHash length"):
            to_block_hash(ADDRESS)
        with pytest.raises(FormatError, match="do not match TxHash length"):
            to_tx_hash(ADDRESS)
        with pytest.raises(FormatError, match="do not match Address length"):
            to_address(KEY)
        with pytest.raises(FormatError, match="do not match PrivateKey length"):
            to_private_key(ADDRESS)

    def test_empty_is_rejected(self) -> None:
        with pytest.raises(FormatError):
            to_address(None)


class TestEpoch:
    def test_tags_case_insensitive(self) -> None:
        assert to_epoch(EARLIEST) == "earliest"
        assert to_epoch("EARLIEST") == "earliest"
        assert to_epoch(LATEST_STATE) == "latest_state"
        assert to_epoch("Latest_Mined") == LATEST_MINED

    def test_numbers(self) -> None:
        assert to_epoch(None) == "0x00"
        assert to_epoch(0) == "0x00"
        assert to_epoch("100") == "0x64"
        assert to_epoch("0x64") == "0x64"
        assert to_epoch(100) == "0x64"

    def test_unknown_text(self) -> None:
        with pytest.raises(FormatError):
            to_epoch("xxxxxxx")


class TestDrip:
    def test_values(self) -> None:
        assert to_drip(0) == "0x00"
        assert to_drip(10) == "0x0a"
        assert to_drip("100") == "0x64"
        assert to_drip("0x100") == "0x0100"
        assert to_drip(Decimal("0.01") * 10**18) == "0x2386f26fc10000"

    def test_none_is_rejected(self) -> None:
        with pytest.raises(FormatError):
            to_drip(None)

    @pytest.mark.parametrize("value", [-1, "-5", "1.5", 0.5])
    def test_non_integer_is_rejected(self, value: object) -> None:
        with pytest.raises(FormatError):
            to_drip(value)

    def test_from_gdrip(self) -> None:
        assert drip_from_gdrip(0) == "0x00"
        assert drip_from_gdrip(0.01) == "0x989680"
        assert drip_from_gdrip(1) == "0x3b9aca00"
        assert drip_from_gdrip("2") == to_drip(2 * 10**9)

    def test_from_cfx(self) -> None:
        assert drip_from_cfx(0) == "0x00"
        assert drip_from_cfx(0.01) == "0x2386f26fc10000"
        assert drip_from_cfx(1) == "0x0de0b6b3a7640000"
        assert drip_from_cfx("0.023") == to_drip(23 * 10**15)

    def test_scaling_is_exact(self) -> None:
        # 0.1 + 0.2 style binary float drift must not leak into the result
        assert drip_from_cfx(0.3) == to_drip(3 * 10**17)
        assert drip_from_cfx("123456789.123456789123456789") == to_drip(123456789123456789123456789)

    def test_fraction_of_a_drip_is_rejected(self) -> None:
        with pytest.raises(FormatError, match="can not parse"):
            drip_from_gdrip("0.0000000001")
        with pytest.raises(FormatError, match="can not parse"):
            drip_from_cfx("1e-19")

    @pytest.mark.parametrize("value", ["Infinity", "-inf", float("inf"), float("nan"), "NaN", "sNaN"])
    def test_non_finite_amounts_are_rejected(self, value: object) -> None:
        with pytest.raises(FormatError):
            drip_from_cfx(value)
        with pytest.raises(FormatError):
            drip_from_gdrip(value)
        with pytest.raises(FormatError):
            to_drip(value)

    def test_out_of_range_exponent_is_rejected(self) -> None:
        with pytest.raises(FormatError):
            drip_from_cfx("1e999999999999999999")
