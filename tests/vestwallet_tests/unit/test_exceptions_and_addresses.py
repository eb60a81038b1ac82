import pytest

from vestwallet.core.address_checksum import (
    ZERO_ADDRESS,
    is_checksum_valid,
    is_null_address,
    normalize_address,
    normalize_identity,
    validate_address,
)
from vestwallet.core.vesting_exceptions import (
    AccountingError,
    AuthorizationError,
    InvalidArgumentError,
    MalformedSignatureError,
    SignatureError,
    TransferFailureError,
    VestingError,
    get_error_context,
    is_recoverable_error,
)

LOWER = "0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed"
CHECKSUMMED = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"


class TestAddressChecksum:
    def test_normalize_checksums_lowercase_input(self):
        assert normalize_address(LOWER) == CHECKSUMMED
        assert normalize_address(CHECKSUMMED) == CHECKSUMMED

    def test_bad_checksum_rejected(self):
        bad = CHECKSUMMED[:-1] + "D"
        assert is_checksum_valid(bad) is False
        valid, message = validate_address(bad)
        assert valid is False
        assert CHECKSUMMED in message
        with pytest.raises(ValueError):
            normalize_address(bad)

    @pytest.mark.parametrize("address", ["5aaeb6053f3e94c9b9a09f33669435e7ef1beaed", "0x1234", "0x" + "zz" * 20, 42])
    def test_malformed_addresses(self, address):
        valid, _ = validate_address(address)
        assert valid is False

    def test_null_identity(self):
        assert is_null_address(None) is True
        assert is_null_address("") is True
        assert is_null_address(ZERO_ADDRESS) is True
        assert is_null_address(LOWER) is False
        assert normalize_identity(ZERO_ADDRESS) is None
        assert normalize_identity(LOWER) == CHECKSUMMED


class TestErrorHelpers:
    def test_hierarchy(self):
        assert issubclass(MalformedSignatureError, SignatureError)
        assert issubclass(SignatureError, InvalidArgumentError)
        for cls in (AuthorizationError, InvalidArgumentError, TransferFailureError, AccountingError):
            assert issubclass(cls, VestingError)

    def test_vesting_errors_are_not_recoverable(self):
        assert is_recoverable_error(TransferFailureError("declined")) is False
        assert is_recoverable_error(AccountingError("broken")) is False
        assert is_recoverable_error(ConnectionError()) is True
        assert is_recoverable_error(ValueError()) is False

    def test_error_context_includes_typed_fields(self):
        context = get_error_context(AuthorizationError("nope", caller="0xabc", role="revoker"))
        assert context["error_type"] == "AuthorizationError"
        assert context["caller"] == "0xabc"
        assert context["role"] == "revoker"

        context = get_error_context(TransferFailureError("declined", amount=5, details={"reason": "paused"}))
        assert context["asset"] == "native"
        assert context["amount"] == 5
        assert context["details"] == {"reason": "paused"}
        assert context["recoverable"] is False
