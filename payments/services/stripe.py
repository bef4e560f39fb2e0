import logging
from decimal import ROUND_HALF_UP, Decimal

import stripe
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from ..exceptions import PaymentError
from ..models import Payment
from .base import PaymentProvider

logger = logging.getLogger(__name__)

SUCCEEDED_EVENT = 'payment_intent.succeeded'


class WebhookError(PaymentError):
    """The webhook could not be verified or does not match a stored payment."""


def to_minor_units(amount):
    return int((Decimal(str(amount)) * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


class StripeProvider(PaymentProvider):
    name = 'stripe'

    def __init__(self, api_key=None, webhook_secret=None):
        self.api_key = api_key if api_key is not None else settings.STRIPE_SECRET_KEY
        self.webhook_secret = webhook_secret if webhook_secret is not None else settings.STRIPE_WEBHOOK_SECRET

    def initiate(self, amount, currency, user_id, session_id):
        """Create a PaymentIntent and the pending Payment row tracking it."""
        intent = stripe.PaymentIntent.create(
            amount=to_minor_units(amount),
            currency=currency,
            metadata={"userId": str(user_id), "sessionId": str(session_id)},
            api_key=self.api_key,
        )
        if not getattr(intent, 'id', None):
            raise PaymentError("Stripe PaymentIntent ID is missing")
        logger.info("Created PaymentIntent %s for user %s session %s", intent.id, user_id, session_id)

        payment = Payment.objects.create(
            user_id=user_id,
            session_id=session_id,
            amount=amount,
            stripe_payment_id=intent.id,
            payment_status=Payment.Status.PENDING,
            payment_date=timezone.localdate(),
        )
        return payment, intent

    def construct_event(self, payload, signature):
        if not self.webhook_secret:
            raise WebhookError("Stripe webhook secret is not defined")
        try:
            return stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except (ValueError, stripe.SignatureVerificationError) as e:
            raise WebhookError(f"Invalid webhook: {e}") from e

    def handle_event(self, event):
        """Apply a verified event. Returns the updated Payment, or None for ignored events."""
        logger.info("Stripe event received: %s", event.type)
        if event.type != SUCCEEDED_EVENT:
            return None

        intent = event.data.object
        metadata = getattr(intent, 'metadata', None)
        user_id = getattr(metadata, 'userId', None)
        session_id = getattr(metadata, 'sessionId', None)
        if not user_id or not session_id:
            raise WebhookError("Missing metadata")
        try:
            user_id, session_id = int(user_id), int(session_id)
        except ValueError as e:
            raise WebhookError("Invalid metadata") from e

        with transaction.atomic():
            payment = (
                Payment.objects.select_for_update()
                .filter(user_id=user_id, session_id=session_id)
                .order_by('-created_at')
                .first()
            )
            if payment is None:
                raise WebhookError("Payment record not found")
            payment.payment_status = Payment.Status.COMPLETED
            payment.stripe_payment_id = intent.id
            payment.save(update_fields=['payment_status', 'stripe_payment_id', 'updated_at'])

        logger.info("Payment %s completed by intent %s", payment.pk, intent.id)
        return payment
