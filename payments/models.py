import json

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from therapy_project.api import to_json_value


class MpesaTransaction(models.Model):
    """One STK Push attempt, created once Daraja accepts the request and
    completed by the matching callback."""

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        SUCCESS = 'success', 'Success'
        FAILED = 'failed', 'Failed'

    # Provider references
    merchant_request_id = models.CharField(max_length=100)
    checkout_request_id = models.CharField(max_length=100, unique=True, db_index=True)

    phone_number = models.CharField(max_length=15)  # e.g. 2547XXXXXXXX
    amount = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(1)])
    reference_code = models.CharField(max_length=50)
    description = models.CharField(max_length=255)
    transaction_date = models.DateTimeField(default=timezone.now)

    # Filled in by the callback
    mpesa_receipt_number = models.CharField(max_length=50, blank=True, null=True)
    result_code = models.IntegerField(blank=True, null=True)
    result_description = models.CharField(max_length=255, blank=True, null=True)
    is_complete = models.BooleanField(default=False)
    # None until the callback says otherwise
    is_successful = models.BooleanField(blank=True, null=True, default=None)
    callback_metadata = models.TextField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'mpesa_transactions'
        ordering = ['created_at']
        verbose_name = 'M-Pesa transaction'

    def __str__(self):
        return f"{self.phone_number} - {self.amount} - {self.status}"

    @property
    def status(self):
        if not self.is_complete:
            return self.Status.PENDING
        return self.Status.SUCCESS if self.is_successful else self.Status.FAILED

    @property
    def metadata_items(self):
        if not self.callback_metadata:
            return []
        return json.loads(self.callback_metadata)

    def to_dict(self):
        fields = [
            'id', 'merchant_request_id', 'checkout_request_id', 'phone_number', 'amount',
            'reference_code', 'description', 'transaction_date', 'mpesa_receipt_number',
            'result_code', 'result_description', 'is_complete', 'is_successful',
            'callback_metadata', 'created_at', 'updated_at',
        ]
        data = {name: to_json_value(getattr(self, name)) for name in fields}
        data['status'] = str(self.status)
        return data


class Payment(models.Model):
    """A card payment for a therapy session, backed by a Stripe PaymentIntent."""

    class Status(models.TextChoices):
        PENDING = 'Pending', 'Pending'
        COMPLETED = 'Completed', 'Completed'
        FAILED = 'Failed', 'Failed'

    user = models.ForeignKey('clinic.User', on_delete=models.CASCADE, related_name='payments')
    session = models.ForeignKey('clinic.TherapySession', on_delete=models.CASCADE, related_name='payments')
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    payment_status = models.CharField(max_length=50, choices=Status.choices, default=Status.PENDING)
    payment_date = models.DateField(default=timezone.localdate)
    stripe_payment_id = models.TextField()

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'payments'
        verbose_name = 'payment'

    def __str__(self):
        return f"stripe:{self.stripe_payment_id} {self.amount} - {self.payment_status}"
