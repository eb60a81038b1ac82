import pytest
from eth_utils import keccak

from vestwallet.core.address_checksum import ZERO_ADDRESS
from vestwallet.core.crypto_utils import (
    _CURVE_ORDER,  # pylint: disable=protected-access
    _HALF_CURVE_ORDER,  # pylint: disable=protected-access
    address_from_private_key,
    generate_secp256k1_keypair_hex,
    hash_personal_message,
    is_canonical_signature,
    recover_signer_address,
    sign_digest,
)

# Well-known test vector: private key 1
PRIVATE_KEY_ONE = "0x" + "00" * 31 + "01"
ADDRESS_ONE = "0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf"


def test_address_from_known_private_key():
    assert address_from_private_key(PRIVATE_KEY_ONE) == ADDRESS_ONE


def test_generated_keypair_is_consistent():
    private_hex, address = generate_secp256k1_keypair_hex()
    assert len(bytes.fromhex(private_hex)) == 32
    assert address == address_from_private_key(private_hex)


def test_sign_and_recover_round_trip():
    private_hex, address = generate_secp256k1_keypair_hex()
    digest = keccak(b"payload")
    signature = sign_digest(private_hex, digest)

    r = int.from_bytes(signature[:32], "big")
    s = int.from_bytes(signature[32:64], "big")
    v = signature[64]

    assert 1 <= r < _CURVE_ORDER
    assert 1 <= s <= _HALF_CURVE_ORDER  # low-S form
    assert is_canonical_signature(r, s) is True
    assert recover_signer_address(digest, v, r, s) == address


def test_sign_rejects_short_digest():
    with pytest.raises(ValueError):
        sign_digest(PRIVATE_KEY_ONE, b"\x01" * 31)


def test_bad_private_key_length_rejected():
    with pytest.raises(ValueError):
        address_from_private_key("abcd")


@pytest.mark.parametrize(
    "v,r,s",
    [
        (27, 0, 1),  # r = 0
        (27, 1, 0),  # s = 0
        (27, _CURVE_ORDER, 1),  # r >= order
        (26, 1, 1),  # v out of range
    ],
)
def test_recover_returns_null_address_on_failure(v, r, s):
    assert recover_signer_address(keccak(b"x"), v, r, s) == ZERO_ADDRESS


def test_recover_rejects_wrong_digest_length():
    assert recover_signer_address(b"\x00" * 31, 27, 1, 1) == ZERO_ADDRESS


def test_canonical_check():
    assert is_canonical_signature(1, _HALF_CURVE_ORDER) is True
    assert is_canonical_signature(1, _HALF_CURVE_ORDER + 1) is False
    assert is_canonical_signature(0, 1) is False


def test_personal_message_hash_uses_eip191_prefix():
    assert hash_personal_message(b"hello") == keccak(b"\x19Ethereum Signed Message:\n5hello")
