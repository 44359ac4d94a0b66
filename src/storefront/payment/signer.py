"""Payment integrity signer for the hosted payment gateway (PayHere).

The gateway authenticates a checkout session with a two-stage MD5 digest:

    secret_digest = UPPER(MD5(merchant_secret))
    hash          = UPPER(MD5(merchant_id + order_id + amount + currency + secret_digest))

and signs its server-to-server notifications the same way, with the payment
status code inserted before the secret digest. The algorithm is dictated by
the gateway; changing it here without changing the merchant account breaks
every checkout.

The amount is always rendered with exactly two decimals so that the
browser, the gateway and this module hash identical bytes.
"""

import hashlib
import hmac
import os
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

import structlog

logger = structlog.get_logger(__name__)

MERCHANT_ID_ENV = "PAYHERE_MERCHANT_ID"
MERCHANT_SECRET_ENV = "PAYHERE_MERCHANT_SECRET"

PAYHERE_STATUS_SUCCESS = "2"

# The store prices and charges in a single currency
PAYHERE_CURRENCY = "LKR"


class MerchantConfigurationError(Exception):
    """Merchant credentials are missing from the server configuration."""


@dataclass(frozen=True)
class MerchantCredentials:
    merchant_id: str
    merchant_secret: str

    @classmethod
    def from_env(cls) -> "MerchantCredentials":
        merchant_id = os.environ.get(MERCHANT_ID_ENV, "").strip()
        merchant_secret = os.environ.get(MERCHANT_SECRET_ENV, "").strip()
        if not merchant_id or not merchant_secret:
            logger.error(
                "Payment gateway credentials not configured",
                merchant_id_set=bool(merchant_id),
                merchant_secret_set=bool(merchant_secret),
            )
            raise MerchantConfigurationError("PayHere credentials not configured")
        return cls(merchant_id=merchant_id, merchant_secret=merchant_secret)

    def __repr__(self) -> str:
        return f"MerchantCredentials(merchant_id={self.merchant_id!r}, merchant_secret='***')"


@dataclass(frozen=True)
class PaymentHash:
    hash: str
    merchant_id: str


def _md5_upper(value: str) -> str:
    return hashlib.md5(value.encode("utf-8")).hexdigest().upper()


def format_amount(amount) -> str:
    """Canonical two-decimal rendering, rounding half up ("1234.5" -> "1234.50").

    Rounding works on the decimal text of ``amount``, so "1.005" renders as
    "1.01" where a browser's binary-float ``toFixed(2)`` gives "1.00". The
    checkout hash endpoint returns the amount it signed, and the browser
    posts that string to the gateway instead of formatting its own.
    """
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {amount!r}") from None
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")
    return str(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def generate_payment_hash(order_id, amount, currency, credentials: MerchantCredentials | None = None) -> PaymentHash:
    """Hash authorising a gateway checkout session for ``order_id``.

    Credentials default to the ones configured in the environment.
    """
    credentials = credentials or MerchantCredentials.from_env()

    secret_digest = _md5_upper(credentials.merchant_secret)
    payload = f"{credentials.merchant_id}{order_id}{format_amount(amount)}{currency}{secret_digest}"
    return PaymentHash(hash=_md5_upper(payload), merchant_id=credentials.merchant_id)


def notification_signature(
    merchant_id, order_id, amount, currency, status_code, credentials: MerchantCredentials | None = None
) -> str:
    credentials = credentials or MerchantCredentials.from_env()

    secret_digest = _md5_upper(credentials.merchant_secret)
    payload = f"{merchant_id}{order_id}{format_amount(amount)}{currency}{status_code}{secret_digest}"
    return _md5_upper(payload)


def verify_notification(
    merchant_id,
    order_id,
    amount,
    currency,
    status_code,
    md5sig: str,
    credentials: MerchantCredentials | None = None,
) -> bool:
    """Check that a payment notification was signed with our merchant secret."""
    credentials = credentials or MerchantCredentials.from_env()
    if str(merchant_id) != credentials.merchant_id:
        return False

    expected = notification_signature(merchant_id, order_id, amount, currency, status_code, credentials)
    return hmac.compare_digest(expected, (md5sig or "").upper())
