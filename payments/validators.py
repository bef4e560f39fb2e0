"""
Typed request parsing for the M-Pesa endpoints.

Each ``parse_*`` function returns either the request dataclass or an
``Invalid`` carrying field-level reasons; neither raises on bad input.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Union

from .forms import DEFAULT_DESCRIPTION, StkPushForm


@dataclass(frozen=True)
class Invalid:
    errors: Dict[str, List[str]]

    def message(self):
        return ', '.join(
            f"{name}: {reason}" for name, reasons in self.errors.items() for reason in reasons
        )


@dataclass(frozen=True)
class StkPushRequest:
    phone_number: str
    amount: Decimal
    reference_code: str
    description: str = DEFAULT_DESCRIPTION


@dataclass(frozen=True)
class CallbackItem:
    name: str
    value: Optional[Union[str, int, float]] = None


@dataclass(frozen=True)
class StkCallback:
    merchant_request_id: str
    checkout_request_id: str
    result_code: int
    result_description: str
    metadata: Optional[List[CallbackItem]] = None
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    @property
    def succeeded(self):
        return self.result_code == 0

    def metadata_value(self, name):
        for item in self.metadata or []:
            if item.name == name:
                return item.value
        return None


def parse_stk_push(data) -> Union[StkPushRequest, Invalid]:
    data = dict(data)
    data.setdefault('description', DEFAULT_DESCRIPTION)
    form = StkPushForm(data)
    if not form.is_valid():
        return Invalid({name: [str(e) for e in errs] for name, errs in form.errors.items()})
    cleaned = form.cleaned_data
    return StkPushRequest(
        phone_number=cleaned['phoneNumber'],
        amount=cleaned['amount'],
        reference_code=cleaned['referenceCode'],
        description=cleaned['description'],
    )


def _require(container, key, kind, path, errors):
    value = container.get(key)
    # bool is an int subclass but never a valid ResultCode
    if value is None or isinstance(value, bool) or not isinstance(value, kind):
        errors[f"{path}.{key}"] = [f"Expected {kind.__name__}"]
        return None
    return value


def parse_callback(data) -> Union[StkCallback, Invalid]:
    """Validate the ``{"Body": {"stkCallback": {...}}}`` envelope Daraja posts."""
    if not isinstance(data, dict) or not isinstance(data.get('Body'), dict):
        return Invalid({'Body': ['Required']})
    stk = data['Body'].get('stkCallback')
    if not isinstance(stk, dict):
        return Invalid({'Body.stkCallback': ['Required']})

    path = 'Body.stkCallback'
    errors = {}
    merchant_request_id = _require(stk, 'MerchantRequestID', str, path, errors)
    checkout_request_id = _require(stk, 'CheckoutRequestID', str, path, errors)
    result_code = _require(stk, 'ResultCode', int, path, errors)
    result_description = _require(stk, 'ResultDesc', str, path, errors)

    metadata = None
    raw_metadata = stk.get('CallbackMetadata')
    if raw_metadata is not None:
        items = raw_metadata.get('Item') if isinstance(raw_metadata, dict) else None
        if not isinstance(items, list):
            errors[f"{path}.CallbackMetadata.Item"] = ['Expected list']
        else:
            metadata = []
            for index, item in enumerate(items):
                item_path = f"{path}.CallbackMetadata.Item.{index}"
                if not isinstance(item, dict) or not isinstance(item.get('Name'), str):
                    errors[f"{item_path}.Name"] = ['Expected str']
                    continue
                value = item.get('Value')
                if value is not None and (isinstance(value, bool) or not isinstance(value, (str, int, float))):
                    errors[f"{item_path}.Value"] = ['Expected str or number']
                    continue
                metadata.append(CallbackItem(name=item['Name'], value=value))

    if errors:
        return Invalid(errors)
    return StkCallback(
        merchant_request_id=merchant_request_id,
        checkout_request_id=checkout_request_id,
        result_code=result_code,
        result_description=result_description,
        metadata=metadata,
        raw=stk,
    )
