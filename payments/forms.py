from decimal import Decimal

from django import forms
from django.core.validators import RegexValidator

from therapy_project.api import ApiModelForm

from .models import Payment

DEFAULT_DESCRIPTION = 'Payment'

# +254XXXXXXXXX, 254XXXXXXXXX, 07XXXXXXXX, 01XXXXXXXX
PHONE_NUMBER_PATTERN = r'^(\+254|254|07|01)\d{8,9}\Z'

phone_number_validator = RegexValidator(
    regex=PHONE_NUMBER_PATTERN,
    message='Invalid phone number format. Use formats like +254XXXXXXXXX, 254XXXXXXXXX, or 07XXXXXXXX',
)


class StrictNumberField(forms.DecimalField):
    """A DecimalField that only accepts JSON numbers, not numeric strings."""

    def to_python(self, value):
        if isinstance(value, bool) or (isinstance(value, str) and value not in self.empty_values):
            raise forms.ValidationError('Amount must be a number', code='invalid')
        return super().to_python(value)


class StrictTextField(forms.CharField):
    """A CharField that only accepts JSON strings, not numbers."""

    def to_python(self, value):
        if value is not None and not isinstance(value, str):
            raise forms.ValidationError('Expected string', code='invalid')
        return super().to_python(value)


class StkPushForm(forms.Form):
    phoneNumber = StrictTextField(strip=False, validators=[phone_number_validator])
    amount = StrictNumberField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal('1'),
        error_messages={'min_value': 'Amount must be at least 1'},
    )
    referenceCode = StrictTextField(
        min_length=1,
        max_length=50,
        error_messages={
            'required': 'Reference code is required',
            'max_length': 'Reference code cannot exceed 50 characters',
        },
    )
    # Only a missing key falls back to DEFAULT_DESCRIPTION; "" is rejected
    description = StrictTextField(
        min_length=1,
        max_length=255,
        error_messages={
            'required': 'Description is required',
            'max_length': 'Description cannot exceed 255 characters',
        },
    )


class PaymentForm(ApiModelForm):
    class Meta:
        model = Payment
        fields = ['user', 'session', 'amount', 'payment_status', 'payment_date', 'stripe_payment_id']


class PaymentIntentForm(forms.Form):
    amount = forms.DecimalField(min_value=Decimal('0.01'), decimal_places=2)
    currency = forms.CharField(min_length=3, max_length=3)
    userId = forms.IntegerField(min_value=1)
    sessionId = forms.IntegerField(min_value=1)

    def clean_currency(self):
        return self.cleaned_data['currency'].lower()
