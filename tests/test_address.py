import pytest

from owlkit.address import (
    get_checksum_address,
    get_checksum_address40,
    get_checksum_address64,
    keccak256,
    starknet_keccak,
)

EIP55_SAMPLE = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
STARK_BODY = "049d36570d4e46f48e99674bd3fcc84644ddd6b96f7c741b1562b82f9e004dc7"


def test_keccak256_empty():
    assert keccak256(b"").hex() == (
        "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
    )


def test_starknet_keccak_truncates_to_250_bits():
    value = starknet_keccak(b"transfer")
    assert value < 2**250
    assert value.to_bytes(32, "big")[1:] == keccak256(b"transfer")[1:]


def test_eip55_checksum():
    assert get_checksum_address(EIP55_SAMPLE.lower()) == EIP55_SAMPLE
    assert get_checksum_address40("0X" + EIP55_SAMPLE[2:].upper()) == EIP55_SAMPLE


def test_checksum40_is_idempotent():
    assert get_checksum_address40(EIP55_SAMPLE) == EIP55_SAMPLE


def test_checksum40_pads_short_input():
    assert get_checksum_address40("0x1") == "0x" + "0" * 39 + "1"


def test_checksum_address_without_prefix_unchanged():
    assert get_checksum_address("  abc ") == "abc"


def test_checksum_address_empty():
    with pytest.raises(ValueError):
        get_checksum_address("   ")


def test_checksum_address_bad_length():
    with pytest.raises(ValueError):
        get_checksum_address("0x1234")


def test_checksum64_invariants():
    result = get_checksum_address64("0x" + STARK_BODY[1:])
    assert len(result) == 66
    assert result.lower() == "0x" + STARK_BODY
    assert get_checksum_address64(result) == result
    assert get_checksum_address64("0X" + STARK_BODY.upper()) == result


def test_checksum_address_dispatches_to_64():
    address = "0x" + STARK_BODY
    assert get_checksum_address(address) == get_checksum_address64(address)


def test_checksum64_too_long():
    with pytest.raises(ValueError, match="too long"):
        get_checksum_address64("0x1" + "0" * 64)


def test_checksum64_invalid_hex():
    with pytest.raises(ValueError):
        get_checksum_address64("0x" + "zz" * 32)