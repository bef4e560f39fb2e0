"""
Pytest configuration and fixtures.
"""
import datetime
from unittest.mock import MagicMock

import pytest

from clinic.models import Booking, Therapist, TherapySession, User
from payments.services.mpesa import MpesaConfig, MpesaDarajaClient


@pytest.fixture(autouse=True)
def mpesa_settings(settings):
    settings.MPESA_ENV = 'sandbox'
    settings.MPESA_API_URL = 'https://daraja.test'
    settings.MPESA_CONSUMER_KEY = 'consumer-key'
    settings.MPESA_CONSUMER_SECRET = 'consumer-secret'
    settings.MPESA_SHORTCODE = '174379'
    settings.MPESA_PASSKEY = 'passkey'
    settings.MPESA_CALLBACK_URL = 'https://example.com/api/callback'
    settings.MPESA_TIMEOUT = 5
    settings.STRIPE_SECRET_KEY = 'sk_test_fake_key_for_testing'
    settings.STRIPE_WEBHOOK_SECRET = 'whsec_test_fake_secret'
    return settings


@pytest.fixture
def mpesa_config():
    return MpesaConfig(
        consumer_key='consumer-key',
        consumer_secret='consumer-secret',
        shortcode='174379',
        passkey='passkey',
        callback_url='https://example.com/api/callback',
        base_url='https://daraja.test',
        timeout=5,
    )


@pytest.fixture
def mpesa_client(mpesa_config):
    return MpesaDarajaClient(mpesa_config)


def fake_response(status_code=200, json_data=None, text=''):
    """Build a stand-in for requests.Response."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 400
    resp.text = text
    if json_data is None:
        resp.json.side_effect = ValueError('No JSON object could be decoded')
    else:
        resp.json.return_value = json_data
    return resp


@pytest.fixture
def token_response():
    return fake_response(200, {"access_token": "test-token", "expires_in": "3599"})


@pytest.fixture
def accepted_stk_response():
    return fake_response(200, {
        "MerchantRequestID": "29115-34620561-1",
        "CheckoutRequestID": "ws_CO_191220191020363925",
        "ResponseCode": "0",
        "ResponseDescription": "Success. Request accepted for processing",
        "CustomerMessage": "Success. Request accepted for processing",
    })


def stk_callback_payload(checkout_request_id="ws_CO_191220191020363925", result_code=0,
                         result_desc="The service request is processed successfully.",
                         items=None):
    stk = {
        "MerchantRequestID": "29115-34620561-1",
        "CheckoutRequestID": checkout_request_id,
        "ResultCode": result_code,
        "ResultDesc": result_desc,
    }
    if items is not None:
        stk["CallbackMetadata"] = {"Item": items}
    return {"Body": {"stkCallback": stk}}


SUCCESS_ITEMS = [
    {"Name": "Amount", "Value": 500.00},
    {"Name": "MpesaReceiptNumber", "Value": "ABC123"},
    {"Name": "TransactionDate", "Value": 20191219102115},
    {"Name": "PhoneNumber", "Value": 254712345678},
]


@pytest.fixture
def client_user(db):
    return User.objects.create(full_name='Jane Wanjiku', email='jane@example.com', contact_phone='0712345678')


@pytest.fixture
def therapist(db):
    user = User.objects.create(full_name='Dr. Otieno', email='otieno@example.com', role=User.Role.THERAPIST)
    return Therapist.objects.create(user=user, full_name='Dr. Otieno', specialization='CBT', experience_years=7)


@pytest.fixture
def therapy_session(client_user, therapist):
    return TherapySession.objects.create(
        user=client_user, therapist=therapist, session_date=datetime.date(2025, 3, 14), session_notes='Intake',
    )


@pytest.fixture
def booking(client_user, therapist):
    return Booking.objects.create(
        user=client_user, therapist=therapist,
        session_date=datetime.date(2025, 3, 14), session_time=datetime.time(10, 30),
    )
