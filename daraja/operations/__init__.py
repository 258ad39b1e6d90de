"""Outbound Daraja operations, one module per API family."""

from daraja.operations.account import AccountModule
from daraja.operations.b2c import B2CModule
from daraja.operations.c2b import C2BModule
from daraja.operations.stk import StkModule
from daraja.operations.transaction import TransactionModule

__all__ = [
    "AccountModule",
    "B2CModule",
    "C2BModule",
    "StkModule",
    "TransactionModule",
]
