import base64
import datetime as dt
import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

import requests
from django.conf import settings
from requests.auth import HTTPBasicAuth

from ..exceptions import GatewayAuthError, GatewayRequestError
from .base import PaymentProvider

logger = logging.getLogger(__name__)

SANDBOX_URL = 'https://sandbox.safaricom.co.ke'
PRODUCTION_URL = 'https://api.safaricom.co.ke'

TRANSACTION_TYPE = 'CustomerPayBillOnline'
ACCEPTED_RESPONSE_CODE = '0'
COUNTRY_CODE = '254'


def normalize_phone_number(phone_number):
    """
    Bring a Kenyan MSISDN to the 2547XXXXXXXX form Daraja expects.

    +254712345678 -> 254712345678
    0712345678    -> 254712345678
    254712345678  -> unchanged
    """
    if phone_number.startswith('+'):
        return phone_number[1:]
    if phone_number.startswith('0'):
        return f"{COUNTRY_CODE}{phone_number[1:]}"
    return phone_number


@dataclass(frozen=True)
class MpesaConfig:
    consumer_key: str
    consumer_secret: str
    shortcode: str
    passkey: str
    callback_url: str
    base_url: str = SANDBOX_URL
    timeout: int = 30

    @classmethod
    def from_settings(cls):
        env = getattr(settings, 'MPESA_ENV', 'sandbox')
        base_url = getattr(settings, 'MPESA_API_URL', '') or (
            SANDBOX_URL if env == 'sandbox' else PRODUCTION_URL
        )
        return cls(
            consumer_key=getattr(settings, 'MPESA_CONSUMER_KEY', ''),
            consumer_secret=getattr(settings, 'MPESA_CONSUMER_SECRET', ''),
            shortcode=str(getattr(settings, 'MPESA_SHORTCODE', '')),
            passkey=getattr(settings, 'MPESA_PASSKEY', ''),
            callback_url=getattr(settings, 'MPESA_CALLBACK_URL', ''),
            base_url=base_url.rstrip('/'),
            timeout=getattr(settings, 'MPESA_TIMEOUT', 30),
        )


@dataclass(frozen=True)
class StkPushResult:
    """Outcome of an STK Push request.

    ``accepted`` only means Daraja queued the prompt; the payment itself is
    settled later by the callback.
    """

    accepted: bool
    payload: dict
    phone_number: str
    error: str = None

    @property
    def merchant_request_id(self):
        return self.payload.get('MerchantRequestID')

    @property
    def checkout_request_id(self):
        return self.payload.get('CheckoutRequestID')


class MpesaDarajaClient(PaymentProvider):
    name = 'mpesa'

    def __init__(self, config):
        self.config = config

    def access_token(self):
        url = f"{self.config.base_url}/oauth/v1/generate?grant_type=client_credentials"
        try:
            resp = requests.get(
                url,
                auth=HTTPBasicAuth(self.config.consumer_key, self.config.consumer_secret),
                headers={"Accept": "application/json"},
                timeout=self.config.timeout,
            )
        except requests.RequestException as e:
            logger.error("M-Pesa OAuth request failed: %s", e)
            raise GatewayAuthError("Failed to generate access token") from e

        if resp.status_code != 200:
            logger.error("M-Pesa OAuth error: status=%s body=%s", resp.status_code, resp.text)
            raise GatewayAuthError("Failed to generate access token")
        try:
            data = resp.json()
        except ValueError as e:
            logger.error("M-Pesa OAuth returned non-JSON body: %s", resp.text)
            raise GatewayAuthError("Failed to generate access token") from e
        if not isinstance(data, dict) or not data.get('access_token'):
            logger.error("M-Pesa OAuth JSON missing access_token: %s", data)
            raise GatewayAuthError("Failed to generate access token")
        return data['access_token']

    def timestamp(self):
        return dt.datetime.now(dt.timezone.utc).strftime('%Y%m%d%H%M%S')

    def password(self, timestamp):
        raw = f"{self.config.shortcode}{self.config.passkey}{timestamp}".encode('utf-8')
        return base64.b64encode(raw).decode('utf-8')

    @staticmethod
    def _amount(amount):
        amount = Decimal(str(amount))
        whole = amount.quantize(Decimal('1'), rounding=ROUND_HALF_UP)
        return int(whole) if whole == amount else float(amount)

    def initiate(self, phone_number, amount, reference_code, description='Payment'):
        token = self.access_token()
        timestamp = self.timestamp()
        phone = normalize_phone_number(phone_number)

        payload = {
            "BusinessShortCode": self.config.shortcode,
            "Password": self.password(timestamp),
            "Timestamp": timestamp,
            "TransactionType": TRANSACTION_TYPE,
            "Amount": self._amount(amount),
            "PartyA": phone,
            "PartyB": self.config.shortcode,
            "PhoneNumber": phone,
            "CallBackURL": self.config.callback_url,
            "AccountReference": reference_code,
            "TransactionDesc": description,
        }
        headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}

        try:
            resp = requests.post(
                f"{self.config.base_url}/mpesa/stkpush/v1/processrequest",
                json=payload,
                headers=headers,
                timeout=self.config.timeout,
            )
        except requests.RequestException as e:
            logger.error("Failed to reach M-Pesa STK API: %s", e)
            raise GatewayRequestError("Failed to reach M-Pesa STK API") from e

        # Error payloads come back as JSON too; keep them for the caller
        try:
            body = resp.json()
        except ValueError:
            body = {"raw": resp.text}
        if not isinstance(body, dict):
            body = {"raw": body}

        if resp.ok and str(body.get('ResponseCode')) == ACCEPTED_RESPONSE_CODE:
            return StkPushResult(accepted=True, payload=body, phone_number=phone)

        error = (
            body.get('errorMessage')
            or body.get('ResponseDescription')
            or f"STK Push was not accepted (HTTP {resp.status_code})"
        )
        logger.error("STK Push initiation rejected: status=%s body=%s", resp.status_code, body)
        return StkPushResult(accepted=False, payload=body, phone_number=phone, error=error)
