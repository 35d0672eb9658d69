"""Transport implementations exposed to users."""

from .base import InFlightRequest, RequestState, Transport
from .dispatcher import RequestDispatcher
from .http import HttpTransport
from .mapper import ErrorMapper

__all__ = [
    "ErrorMapper",
    "HttpTransport",
    "InFlightRequest",
    "RequestDispatcher",
    "RequestState",
    "Transport",
]
