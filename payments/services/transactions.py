import json
import logging

from django.db import DatabaseError
from django.utils import timezone

from ..exceptions import PersistenceError
from ..models import MpesaTransaction

logger = logging.getLogger(__name__)

RECEIPT_ITEM_NAME = 'MpesaReceiptNumber'


def record_pending(request, result):
    """Store the transaction Daraja just accepted.

    ``request`` is the validated StkPushRequest, ``result`` the accepted
    StkPushResult carrying the provider-assigned identifiers.
    """
    # Logged before the insert so an orphaned provider-side request can be traced
    logger.info(
        "STK Push accepted: checkout=%s merchant=%s payload=%s",
        result.checkout_request_id, result.merchant_request_id, result.payload,
    )
    try:
        return MpesaTransaction.objects.create(
            merchant_request_id=result.merchant_request_id,
            checkout_request_id=result.checkout_request_id,
            phone_number=result.phone_number,
            amount=request.amount,
            reference_code=request.reference_code,
            description=request.description,
            transaction_date=timezone.now(),
        )
    except DatabaseError as e:
        logger.error("Failed to store accepted STK Push %s: %s", result.checkout_request_id, e)
        raise PersistenceError("Failed to store transaction") from e


def apply_callback(callback):
    """Write the callback outcome onto the matching transaction.

    Returns False only when the store update fails. A callback whose
    CheckoutRequestID matches nothing updates no rows and still returns True.
    """
    receipt_number = None
    callback_metadata = None
    if callback.succeeded and callback.metadata is not None:
        items = callback.raw.get('CallbackMetadata', {}).get('Item', [])
        callback_metadata = json.dumps(items)
        receipt = callback.metadata_value(RECEIPT_ITEM_NAME)
        if receipt is not None:
            receipt_number = str(receipt)

    try:
        updated = MpesaTransaction.objects.filter(
            checkout_request_id=callback.checkout_request_id,
        ).update(
            result_code=callback.result_code,
            result_description=callback.result_description,
            is_complete=True,
            is_successful=callback.succeeded,
            mpesa_receipt_number=receipt_number,
            callback_metadata=callback_metadata,
            updated_at=timezone.now(),
        )
    except DatabaseError:
        logger.exception("Error processing M-Pesa callback %s", callback.checkout_request_id)
        return False

    if not updated:
        logger.warning(
            "M-Pesa callback for unknown CheckoutRequestID %s (merchant %s, result %s)",
            callback.checkout_request_id, callback.merchant_request_id, callback.result_code,
        )
    else:
        logger.info(
            "M-Pesa callback applied: checkout=%s result=%s receipt=%s",
            callback.checkout_request_id, callback.result_code, receipt_number,
        )
    return True


def get_by_checkout_request_id(checkout_request_id):
    try:
        return MpesaTransaction.objects.filter(checkout_request_id=checkout_request_id).first()
    except DatabaseError as e:
        logger.error("Error fetching transaction %s: %s", checkout_request_id, e)
        raise PersistenceError("Failed to fetch transaction") from e


def list_transactions():
    try:
        return list(MpesaTransaction.objects.order_by('created_at', 'id'))
    except DatabaseError as e:
        logger.error("Error fetching transactions: %s", e)
        raise PersistenceError("Failed to fetch transactions") from e
