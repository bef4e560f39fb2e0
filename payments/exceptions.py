class PaymentError(Exception):
    """Base class for failures talking to a payment provider or the store."""


class GatewayAuthError(PaymentError):
    """The provider refused the consumer credentials, or could not be reached."""


class GatewayRequestError(PaymentError):
    """The initiation request never got an answer from the provider."""


class PersistenceError(PaymentError):
    """Reading or writing a transaction row failed."""
