from abc import ABC, abstractmethod


class PaymentProvider(ABC):
    """A gateway that can start a payment on behalf of a client."""

    name = None

    @abstractmethod
    def initiate(self, **kwargs):
        raise NotImplementedError
