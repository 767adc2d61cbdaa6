"""netsweep - Target resolution, address enumeration and outcome classification."""

__version__ = "1.0.0"

from netsweep.core.classifier import NetworkOperationError, classify
from netsweep.core.config import Settings
from netsweep.core.models import NetworkPrefix, Outcome, TargetSpec
from netsweep.core.resolver import TargetResolver, resolve_target

__all__ = [
    "Settings",
    "NetworkPrefix",
    "Outcome",
    "TargetSpec",
    "TargetResolver",
    "resolve_target",
    "NetworkOperationError",
    "classify",
]
