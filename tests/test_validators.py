"""
Unit tests for M-Pesa request parsing.
"""
from decimal import Decimal

import pytest

from payments.validators import Invalid, StkCallback, StkPushRequest, parse_callback, parse_stk_push

from .conftest import SUCCESS_ITEMS, stk_callback_payload


class TestParseStkPush:

    @pytest.mark.parametrize('phone', ['+254712345678', '254712345678', '0712345678', '0112345678'])
    def test_accepts_regional_formats(self, phone):
        result = parse_stk_push({"phoneNumber": phone, "amount": 500, "referenceCode": "INV1"})
        assert isinstance(result, StkPushRequest)
        assert result.phone_number == phone
        assert result.amount == Decimal('500')
        assert result.description == 'Payment'

    @pytest.mark.parametrize('phone', ['712345678', '+1555123456', '07123', '0812345678', 'abc'])
    def test_rejects_other_phone_numbers(self, phone):
        result = parse_stk_push({"phoneNumber": phone, "amount": 500, "referenceCode": "INV1"})
        assert isinstance(result, Invalid)
        assert list(result.errors) == ['phoneNumber']

    @pytest.mark.parametrize('amount', [0, -1, -500, 0.5])
    def test_rejects_amounts_below_one(self, amount):
        result = parse_stk_push({"phoneNumber": "0712345678", "amount": amount, "referenceCode": "INV1"})
        assert isinstance(result, Invalid)
        assert 'amount' in result.errors

    @pytest.mark.parametrize('amount', ['500', True, None])
    def test_amount_must_be_a_number(self, amount):
        result = parse_stk_push({"phoneNumber": "0712345678", "amount": amount, "referenceCode": "INV1"})
        assert isinstance(result, Invalid)
        assert 'amount' in result.errors

    def test_reference_code_length(self):
        result = parse_stk_push({"phoneNumber": "0712345678", "amount": 1, "referenceCode": "X" * 51})
        assert isinstance(result, Invalid)
        assert result.errors['referenceCode'] == ['Reference code cannot exceed 50 characters']

        result = parse_stk_push({"phoneNumber": "0712345678", "amount": 1, "referenceCode": ""})
        assert isinstance(result, Invalid)
        assert result.errors['referenceCode'] == ['Reference code is required']

    def test_description_limit(self):
        result = parse_stk_push({
            "phoneNumber": "0712345678", "amount": 1, "referenceCode": "INV1", "description": "d" * 256,
        })
        assert isinstance(result, Invalid)
        assert 'description' in result.errors

    def test_description_passes_through(self):
        result = parse_stk_push({
            "phoneNumber": "0712345678", "amount": 1, "referenceCode": "INV1", "description": "Session fee",
        })
        assert result.description == 'Session fee'

    @pytest.mark.parametrize('description', ["", None, "   "])
    def test_blank_description_is_rejected(self, description):
        result = parse_stk_push({
            "phoneNumber": "0712345678", "amount": 1, "referenceCode": "INV1", "description": description,
        })
        assert isinstance(result, Invalid)
        assert result.errors['description'] == ['Description is required']

    def test_missing_description_defaults(self):
        result = parse_stk_push({"phoneNumber": "0712345678", "amount": 1, "referenceCode": "INV1"})
        assert result.description == 'Payment'

    @pytest.mark.parametrize('phone', [712345678, 254712345678, True, ["0712345678"]])
    def test_phone_number_must_be_a_string(self, phone):
        result = parse_stk_push({"phoneNumber": phone, "amount": 1, "referenceCode": "INV1"})
        assert isinstance(result, Invalid)
        assert list(result.errors) == ['phoneNumber']

    @pytest.mark.parametrize('phone', [" 0712345678 ", "0712345678 ", "0712345678\n"])
    def test_phone_number_is_not_trimmed(self, phone):
        result = parse_stk_push({"phoneNumber": phone, "amount": 1, "referenceCode": "INV1"})
        assert isinstance(result, Invalid)
        assert list(result.errors) == ['phoneNumber']

    def test_reference_code_must_be_a_string(self):
        result = parse_stk_push({"phoneNumber": "0712345678", "amount": 1, "referenceCode": 12345})
        assert isinstance(result, Invalid)
        assert list(result.errors) == ['referenceCode']

    def test_lists_every_failing_field(self):
        result = parse_stk_push({})
        assert isinstance(result, Invalid)
        assert set(result.errors) == {'phoneNumber', 'amount', 'referenceCode'}
        assert 'phoneNumber:' in result.message()


class TestParseCallback:

    def test_success_callback(self):
        result = parse_callback(stk_callback_payload(items=SUCCESS_ITEMS))
        assert isinstance(result, StkCallback)
        assert result.succeeded
        assert result.checkout_request_id == 'ws_CO_191220191020363925'
        assert result.metadata_value('MpesaReceiptNumber') == 'ABC123'
        assert len(result.metadata) == 4

    def test_cancelled_callback_without_metadata(self):
        result = parse_callback(stk_callback_payload(result_code=1032, result_desc='Request cancelled by user'))
        assert isinstance(result, StkCallback)
        assert not result.succeeded
        assert result.metadata is None
        assert result.metadata_value('MpesaReceiptNumber') is None

    def test_item_without_value(self):
        result = parse_callback(stk_callback_payload(items=[{"Name": "Balance"}]))
        assert isinstance(result, StkCallback)
        assert result.metadata[0].value is None

    @pytest.mark.parametrize('payload', [
        {},
        {"Body": {}},
        {"Body": "nope"},
        {"Body": {"stkCallback": {"CheckoutRequestID": "x"}}},
        ["not", "an", "object"],
    ])
    def test_wrong_shape(self, payload):
        assert isinstance(parse_callback(payload), Invalid)

    def test_result_code_must_be_numeric(self):
        payload = stk_callback_payload()
        payload["Body"]["stkCallback"]["ResultCode"] = "0"
        result = parse_callback(payload)
        assert isinstance(result, Invalid)
        assert 'Body.stkCallback.ResultCode' in result.errors

    def test_metadata_items_need_names(self):
        result = parse_callback(stk_callback_payload(items=[{"Value": 1}]))
        assert isinstance(result, Invalid)
