"""Async client and callback receiver for the Safaricom Daraja (M-Pesa) API."""

from daraja.auth import AuthProvider
from daraja.client import Mpesa
from daraja.config import Settings
from daraja.errors import ErrorKind, MpesaError
from daraja.http import HttpClient

__all__ = [
    "AuthProvider",
    "ErrorKind",
    "HttpClient",
    "Mpesa",
    "MpesaError",
    "Settings",
]
