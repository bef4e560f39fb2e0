import logging

import stripe
from django.db import DatabaseError
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from therapy_project.api import InvalidBody, ModelResource, error_payload, form_errors, read_json

from .exceptions import PaymentError, PersistenceError
from .forms import PaymentForm, PaymentIntentForm
from .models import Payment
from .services import transactions
from .services.mpesa import MpesaConfig, MpesaDarajaClient
from .services.stripe import StripeProvider, WebhookError
from .validators import Invalid, parse_callback, parse_stk_push

logger = logging.getLogger(__name__)


def get_mpesa_client():
    return MpesaDarajaClient(MpesaConfig.from_settings())


def validation_error(invalid):
    return JsonResponse(
        {
            "success": False,
            "message": "Validation error",
            "error": invalid.message(),
            "errors": invalid.errors,
        },
        status=400,
    )


@csrf_exempt
@require_POST
def mpesa_initiate(request):
    try:
        payload = read_json(request)
    except InvalidBody as e:
        return JsonResponse(error_payload("Invalid request body", error=str(e)), status=400)

    stk_request = parse_stk_push(payload)
    if isinstance(stk_request, Invalid):
        return validation_error(stk_request)

    logger.info(
        "Validated payment request: phone=%s amount=%s reference=%s",
        stk_request.phone_number, stk_request.amount, stk_request.reference_code,
    )

    try:
        result = get_mpesa_client().initiate(
            phone_number=stk_request.phone_number,
            amount=stk_request.amount,
            reference_code=stk_request.reference_code,
            description=stk_request.description,
        )
    except PaymentError as e:
        logger.error("Payment initiation failed: %s", e)
        return JsonResponse(error_payload("Failed to initiate payment", e), status=500)
    except Exception as e:
        logger.exception("Payment initiation error")
        return JsonResponse(error_payload("Internal server error", e), status=500)

    if not result.accepted:
        return JsonResponse(
            error_payload(result.error or "Failed to initiate payment", error=result.payload),
            status=500,
        )

    try:
        transactions.record_pending(stk_request, result)
    except PersistenceError as e:
        return JsonResponse(error_payload("Failed to record transaction", e), status=500)

    return JsonResponse({
        "success": True,
        "message": "STK Push initiated successfully",
        "data": result.payload,
    })


@csrf_exempt
@require_POST
def mpesa_callback(request):
    try:
        payload = read_json(request)
    except InvalidBody as e:
        return JsonResponse(error_payload("Invalid callback data format", error=str(e)), status=400)

    callback = parse_callback(payload)
    if isinstance(callback, Invalid):
        logger.error("Invalid callback data: %s", callback.message())
        return JsonResponse(
            error_payload("Invalid callback data format", error=callback.message()),
            status=400,
        )

    if not transactions.apply_callback(callback):
        return JsonResponse(error_payload("Failed to process callback"), status=500)
    return JsonResponse({"success": True, "message": "Callback processed successfully"})


@require_GET
def transaction_status(request, checkout_request_id):
    if not checkout_request_id.strip():
        return JsonResponse(error_payload("Checkout request ID is required"), status=400)
    try:
        txn = transactions.get_by_checkout_request_id(checkout_request_id)
    except PersistenceError as e:
        return JsonResponse(error_payload("Internal server error", e), status=500)
    if txn is None:
        return JsonResponse(error_payload("Transaction not found"), status=404)
    return JsonResponse({"success": True, "data": txn.to_dict()})


@require_GET
def transaction_list(request):
    try:
        txns = transactions.list_transactions()
    except PersistenceError as e:
        return JsonResponse(error_payload("Internal server error", e), status=500)
    return JsonResponse({"success": True, "data": [txn.to_dict() for txn in txns]})


class PaymentResource(ModelResource):
    model = Payment
    form_class = PaymentForm
    label = 'payments'


@csrf_exempt
@require_POST
def create_payment_intent(request):
    try:
        payload = read_json(request)
    except InvalidBody:
        payload = {}

    form = PaymentIntentForm(payload)
    if not form.is_valid():
        return JsonResponse(
            {"error": "Amount, currency, userId, and sessionId are required", "details": form_errors(form)},
            status=400,
        )

    data = form.cleaned_data
    try:
        _, intent = StripeProvider().initiate(
            amount=data['amount'],
            currency=data['currency'],
            user_id=data['userId'],
            session_id=data['sessionId'],
        )
    except (stripe.StripeError, PaymentError, DatabaseError):
        logger.exception("Error creating payment intent")
        return JsonResponse({"error": "Failed to create payment intent"}, status=500)

    return JsonResponse({"clientSecret": intent.client_secret})


@csrf_exempt
@require_POST
def stripe_webhook(request):
    provider = StripeProvider()
    signature = request.headers.get('Stripe-Signature', '')
    try:
        event = provider.construct_event(request.body, signature)
        provider.handle_event(event)
    except WebhookError as e:
        logger.error("Webhook Error: %s", e)
        return JsonResponse({"error": str(e)}, status=400)
    except DatabaseError:
        logger.exception("Webhook processing failed")
        return JsonResponse({"error": "Webhook processing failed"}, status=400)
    return JsonResponse({"received": True})
