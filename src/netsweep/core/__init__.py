"""Core module - Configuration, models, resolution and classification."""

from netsweep.core.classifier import NetworkOperationError, Operation, classify
from netsweep.core.config import Settings
from netsweep.core.enumerator import AddressRange, copy_address, increment_address
from netsweep.core.models import NetworkPrefix, Outcome, ProbeResult, TargetSpec
from netsweep.core.resolver import TargetResolver

__all__ = [
    "Settings",
    "NetworkPrefix",
    "Outcome",
    "ProbeResult",
    "TargetSpec",
    "TargetResolver",
    "AddressRange",
    "copy_address",
    "increment_address",
    "NetworkOperationError",
    "Operation",
    "classify",
]
