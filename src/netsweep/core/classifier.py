"""Classification of connection failures into scan outcomes.

Transport libraries raise their own exception types. Adapters here turn
those into a single tagged NetworkOperationError carrying the socket
operation that failed, and ``classify`` only ever looks at that tag.
"""

from __future__ import annotations

from enum import Enum

import httpx

from netsweep.core.models import Outcome


class Operation(str, Enum):
    """Socket operations a NetworkOperationError can be tagged with."""

    DIAL = "dial"
    READ = "read"
    WRITE = "write"
    TRANSPORT = "transport"


class NetworkOperationError(Exception):
    """A socket operation failed.

    ``op`` names the operation. It is usually an Operation value, but any
    value is accepted and stored as text. ``cause`` keeps the original
    exception for diagnostics.
    """

    def __init__(
        self,
        op: Operation | str,
        address: str | None = None,
        cause: BaseException | None = None,
    ):
        self.op = op.value if isinstance(op, Operation) else str(op)
        self.address = address
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        target = f" {address}" if address else ""
        super().__init__(f"{self.op}{target}{detail}")


_OP_OUTCOMES = {
    # TODO: split refused from timed out once a CONNECTION_REFUSED outcome exists
    Operation.DIAL.value: Outcome.CONNECTION_TIMEOUT,
    Operation.READ.value: Outcome.IO_TIMEOUT,
    Operation.WRITE.value: Outcome.IO_TIMEOUT,
}


def classify(err: BaseException | None) -> Outcome:
    """Map a failure to an Outcome. Never raises.

    ``None`` is a success. Only NetworkOperationError is inspected; any
    other failure, and any unknown operation, is UNKNOWN_ERROR.
    """
    if err is None:
        return Outcome.SUCCESS
    if isinstance(err, NetworkOperationError):
        return _OP_OUTCOMES.get(err.op, Outcome.UNKNOWN_ERROR)
    return Outcome.UNKNOWN_ERROR


def from_httpx_error(exc: httpx.TransportError, address: str | None = None) -> NetworkOperationError:
    """Tag an httpx transport failure with the operation it interrupted."""
    if isinstance(exc, (httpx.ConnectError, httpx.ConnectTimeout)):
        op = Operation.DIAL
    elif isinstance(exc, (httpx.ReadError, httpx.ReadTimeout)):
        op = Operation.READ
    elif isinstance(exc, (httpx.WriteError, httpx.WriteTimeout)):
        op = Operation.WRITE
    else:
        op = Operation.TRANSPORT
    return NetworkOperationError(op, address=address, cause=exc)
