"""
Integration tests for the M-Pesa STK Push endpoints.
"""
import json
from decimal import Decimal
from unittest.mock import patch

import pytest
import requests

from payments.models import MpesaTransaction

from .conftest import SUCCESS_ITEMS, fake_response, stk_callback_payload

pytestmark = pytest.mark.django_db

CHECKOUT_ID = 'ws_CO_191220191020363925'


def post_json(client, url, payload):
    return client.post(url, data=json.dumps(payload), content_type='application/json')


def make_transaction(**overrides):
    fields = dict(
        merchant_request_id='29115-34620561-1',
        checkout_request_id=CHECKOUT_ID,
        phone_number='254712345678',
        amount=Decimal('500.00'),
        reference_code='INV1',
        description='Payment',
    )
    fields.update(overrides)
    return MpesaTransaction.objects.create(**fields)


class TestInitiate:

    def test_accepted_push_is_persisted(self, client, token_response, accepted_stk_response):
        with patch('payments.services.mpesa.requests.get', return_value=token_response), \
                patch('payments.services.mpesa.requests.post', return_value=accepted_stk_response) as post:
            resp = post_json(client, '/api/initiate', {
                "phoneNumber": "0712345678", "amount": 500, "referenceCode": "INV1",
            })

        assert resp.status_code == 200
        body = resp.json()
        assert body['success'] is True
        assert body['data']['CheckoutRequestID'] == CHECKOUT_ID
        assert post.call_args.kwargs['json']['PhoneNumber'] == '254712345678'

        txn = MpesaTransaction.objects.get()
        assert txn.checkout_request_id == CHECKOUT_ID
        assert txn.merchant_request_id == '29115-34620561-1'
        assert txn.phone_number == '254712345678'
        assert txn.amount == Decimal('500.00')
        assert txn.reference_code == 'INV1'
        assert txn.description == 'Payment'
        assert txn.is_complete is False
        assert txn.is_successful is None
        assert txn.status == MpesaTransaction.Status.PENDING

    def test_rejected_push_is_not_persisted(self, client, token_response):
        rejected = fake_response(400, {"errorCode": "400.002.02", "errorMessage": "Bad Request - Invalid Amount"})
        with patch('payments.services.mpesa.requests.get', return_value=token_response), \
                patch('payments.services.mpesa.requests.post', return_value=rejected):
            resp = post_json(client, '/api/initiate', {
                "phoneNumber": "0712345678", "amount": 500, "referenceCode": "INV1",
            })

        assert resp.status_code == 500
        assert resp.json()['success'] is False
        assert resp.json()['message'] == 'Bad Request - Invalid Amount'
        assert not MpesaTransaction.objects.exists()

    def test_non_zero_response_code_is_not_persisted(self, client, token_response):
        body = {"MerchantRequestID": "1", "CheckoutRequestID": "2", "ResponseCode": "1", "ResponseDescription": "No"}
        with patch('payments.services.mpesa.requests.get', return_value=token_response), \
                patch('payments.services.mpesa.requests.post', return_value=fake_response(200, body)):
            resp = post_json(client, '/api/initiate', {
                "phoneNumber": "0712345678", "amount": 500, "referenceCode": "INV1",
            })

        assert resp.status_code == 500
        assert not MpesaTransaction.objects.exists()

    @pytest.mark.parametrize('amount', [0, -10])
    def test_invalid_amount_never_reaches_gateway(self, client, amount):
        with patch('payments.services.mpesa.requests.get') as get, \
                patch('payments.services.mpesa.requests.post') as post:
            resp = post_json(client, '/api/initiate', {
                "phoneNumber": "0712345678", "amount": amount, "referenceCode": "INV1",
            })

        assert resp.status_code == 400
        body = resp.json()
        assert body['success'] is False
        assert body['message'] == 'Validation error'
        assert 'amount' in body['errors']
        get.assert_not_called()
        post.assert_not_called()
        assert not MpesaTransaction.objects.exists()

    def test_auth_failure_is_generic_500(self, client):
        with patch('payments.services.mpesa.requests.get', return_value=fake_response(401, {}, text='denied')), \
                patch('payments.services.mpesa.requests.post') as post:
            resp = post_json(client, '/api/initiate', {
                "phoneNumber": "0712345678", "amount": 500, "referenceCode": "INV1",
            })

        assert resp.status_code == 500
        assert resp.json() == {"success": False, "message": "Failed to initiate payment"}
        post.assert_not_called()
        assert not MpesaTransaction.objects.exists()

    def test_network_failure_writes_nothing(self, client, token_response):
        with patch('payments.services.mpesa.requests.get', return_value=token_response), \
                patch('payments.services.mpesa.requests.post', side_effect=requests.ConnectionError('down')):
            resp = post_json(client, '/api/initiate', {
                "phoneNumber": "0712345678", "amount": 500, "referenceCode": "INV1",
            })

        assert resp.status_code == 500
        assert not MpesaTransaction.objects.exists()

    def test_stack_only_in_debug(self, client, settings):
        settings.DEBUG = True
        with patch('payments.services.mpesa.requests.get', side_effect=requests.ConnectionError('down')):
            resp = post_json(client, '/api/initiate', {
                "phoneNumber": "0712345678", "amount": 500, "referenceCode": "INV1",
            })
        assert resp.status_code == 500
        assert 'GatewayAuthError' in resp.json()['stack']

    def test_malformed_json(self, client):
        resp = client.post('/api/initiate', data='{not json', content_type='application/json')
        assert resp.status_code == 400
        assert resp.json()['success'] is False

    def test_get_not_allowed(self, client):
        assert client.get('/api/initiate').status_code == 405


class TestCallback:

    def test_successful_payment(self, client):
        make_transaction()
        resp = post_json(client, '/api/callback', stk_callback_payload(items=SUCCESS_ITEMS))

        assert resp.status_code == 200
        assert resp.json()['success'] is True
        txn = MpesaTransaction.objects.get()
        assert txn.mpesa_receipt_number == 'ABC123'
        assert txn.is_complete is True
        assert txn.is_successful is True
        assert txn.result_code == 0
        assert txn.result_description == 'The service request is processed successfully.'
        assert txn.metadata_items == SUCCESS_ITEMS
        assert txn.status == MpesaTransaction.Status.SUCCESS

    def test_cancelled_by_user(self, client):
        make_transaction()
        resp = post_json(client, '/api/callback', stk_callback_payload(
            result_code=1032, result_desc='Request cancelled by user',
        ))

        assert resp.status_code == 200
        txn = MpesaTransaction.objects.get()
        assert txn.is_complete is True
        assert txn.is_successful is False
        assert txn.mpesa_receipt_number is None
        assert txn.callback_metadata is None
        assert txn.result_code == 1032
        assert txn.status == MpesaTransaction.Status.FAILED

    def test_unmatched_checkout_id_is_a_logged_no_op(self, client):
        txn = make_transaction()
        before = MpesaTransaction.objects.values().get(pk=txn.pk)

        with patch('payments.services.transactions.logger') as logger:
            resp = post_json(client, '/api/callback', stk_callback_payload(
                checkout_request_id='ws_CO_unknown', items=SUCCESS_ITEMS,
            ))

        assert resp.status_code == 200
        assert resp.json()['success'] is True
        assert MpesaTransaction.objects.values().get(pk=txn.pk) == before
        logger.warning.assert_called_once()

    def test_repeated_callback_is_idempotent(self, client):
        make_transaction()
        payload = stk_callback_payload(items=SUCCESS_ITEMS)
        fields = ['mpesa_receipt_number', 'result_code', 'result_description',
                  'is_complete', 'is_successful', 'callback_metadata']

        post_json(client, '/api/callback', payload)
        once = MpesaTransaction.objects.values(*fields).get()
        post_json(client, '/api/callback', payload)
        twice = MpesaTransaction.objects.values(*fields).get()

        assert once == twice

    def test_wrong_shape_is_rejected_without_mutation(self, client):
        make_transaction()
        resp = post_json(client, '/api/callback', {"Body": {"stkCallback": {"CheckoutRequestID": CHECKOUT_ID}}})

        assert resp.status_code == 400
        assert resp.json()['success'] is False
        txn = MpesaTransaction.objects.get()
        assert txn.is_complete is False

    def test_store_failure_is_500(self, client):
        with patch('payments.views.transactions.apply_callback', return_value=False):
            resp = post_json(client, '/api/callback', stk_callback_payload())
        assert resp.status_code == 500
        assert resp.json() == {"success": False, "message": "Failed to process callback"}


class TestQueries:

    def test_transaction_by_checkout_id(self, client):
        make_transaction()
        resp = client.get(f'/api/transaction/{CHECKOUT_ID}')

        assert resp.status_code == 200
        data = resp.json()['data']
        assert data['checkout_request_id'] == CHECKOUT_ID
        assert data['amount'] == '500.00'
        assert data['is_complete'] is False
        assert data['is_successful'] is None
        assert data['status'] == 'pending'

    def test_unknown_checkout_id_is_404(self, client):
        resp = client.get('/api/transaction/ws_CO_missing')
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "message": "Transaction not found"}

    def test_all_transactions_in_creation_order(self, client):
        make_transaction(checkout_request_id='first')
        make_transaction(checkout_request_id='second')
        resp = client.get('/api/transactions')

        assert resp.status_code == 200
        ids = [t['checkout_request_id'] for t in resp.json()['data']]
        assert ids == ['first', 'second']

    def test_empty_list(self, client):
        resp = client.get('/api/transactions')
        assert resp.json() == {"success": True, "data": []}
