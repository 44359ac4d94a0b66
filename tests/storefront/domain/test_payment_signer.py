"""Tests for the payment gateway hash signer."""

import hashlib

import pytest

from storefront.payment.signer import (
    MerchantConfigurationError,
    MerchantCredentials,
    format_amount,
    generate_payment_hash,
    notification_signature,
    verify_notification,
)

CREDENTIALS = MerchantCredentials(merchant_id="1211149", merchant_secret="s3cret")


def _md5_upper(value):
    return hashlib.md5(value.encode()).hexdigest().upper()


class TestFormatAmount:
    @pytest.mark.parametrize(
        "amount, expected",
        [(1000, "1000.00"), (1234.5, "1234.50"), ("99.999", "100.00"), ("0.005", "0.01"), (3430.0, "3430.00")],
    )
    def test_two_decimals_half_up(self, amount, expected):
        assert format_amount(amount) == expected

    def test_rounds_decimal_text_not_binary_float(self):
        # 1.005 is stored as 1.00499999... in binary, which toFixed(2) renders "1.00"
        assert format_amount("1.005") == "1.01"
        assert format_amount(1.005) == "1.01"

    @pytest.mark.parametrize("amount", ["abc", "", "NaN", "Infinity"])
    def test_rejects_non_numeric(self, amount):
        with pytest.raises(ValueError):
            format_amount(amount)


class TestGeneratePaymentHash:
    def test_two_stage_md5(self):
        expected = _md5_upper("1211149" + "ORD-1" + "3430.00" + "LKR" + _md5_upper("s3cret"))
        signed = generate_payment_hash("ORD-1", 3430, "LKR", CREDENTIALS)
        assert signed.hash == expected
        assert signed.merchant_id == "1211149"

    def test_hash_is_uppercase_hex(self):
        signed = generate_payment_hash("ORD-1", 10, "LKR", CREDENTIALS)
        assert signed.hash == signed.hash.upper()
        assert len(signed.hash) == 32

    def test_deterministic(self):
        first = generate_payment_hash("ORD-9", "1500.5", "LKR", CREDENTIALS)
        second = generate_payment_hash("ORD-9", 1500.50, "LKR", CREDENTIALS)
        assert first == second

    def test_amount_changes_hash(self):
        first = generate_payment_hash("ORD-9", 1500, "LKR", CREDENTIALS)
        second = generate_payment_hash("ORD-9", 1501, "LKR", CREDENTIALS)
        assert first.hash != second.hash

    def test_reads_credentials_from_environment(self, merchant_env):
        signed = generate_payment_hash("ORD-1", 100, "LKR")
        assert signed.merchant_id == "1211149"

    def test_missing_configuration_raises(self, no_merchant_env):
        with pytest.raises(MerchantConfigurationError):
            generate_payment_hash("ORD-1", 100, "LKR")

    def test_blank_secret_is_missing(self, monkeypatch):
        monkeypatch.setenv("PAYHERE_MERCHANT_ID", "1211149")
        monkeypatch.setenv("PAYHERE_MERCHANT_SECRET", "   ")
        with pytest.raises(MerchantConfigurationError):
            MerchantCredentials.from_env()


class TestCredentials:
    def test_repr_masks_secret(self):
        assert "s3cret" not in repr(CREDENTIALS)


class TestVerifyNotification:
    def _signature(self, status_code="2", amount="3430.00"):
        return notification_signature("1211149", "ORD-1", amount, "LKR", status_code, CREDENTIALS)

    def test_valid_signature(self):
        assert verify_notification("1211149", "ORD-1", "3430.00", "LKR", "2", self._signature(), CREDENTIALS)

    def test_lowercase_signature_accepted(self):
        signature = self._signature().lower()
        assert verify_notification("1211149", "ORD-1", "3430.00", "LKR", "2", signature, CREDENTIALS)

    def test_tampered_amount_rejected(self):
        signature = self._signature()
        assert not verify_notification("1211149", "ORD-1", "1.00", "LKR", "2", signature, CREDENTIALS)

    def test_tampered_status_rejected(self):
        signature = self._signature(status_code="-1")
        assert not verify_notification("1211149", "ORD-1", "3430.00", "LKR", "2", signature, CREDENTIALS)

    def test_foreign_merchant_rejected(self):
        signature = notification_signature("999", "ORD-1", "3430.00", "LKR", "2", CREDENTIALS)
        assert not verify_notification("999", "ORD-1", "3430.00", "LKR", "2", signature, CREDENTIALS)

    def test_missing_signature_rejected(self):
        assert not verify_notification("1211149", "ORD-1", "3430.00", "LKR", "2", None, CREDENTIALS)
