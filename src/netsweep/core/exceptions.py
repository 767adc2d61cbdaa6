"""Custom exceptions for netsweep.

Target resolution failures raise immediately and are never recovered
locally. Connection failures are not exceptions at this level: they are
classified into an Outcome instead (see ``netsweep.core.classifier``).
"""

from __future__ import annotations


class NetsweepError(Exception):
    """Base exception for all netsweep errors.
    
    All custom exceptions inherit from this class, allowing callers to
    catch every netsweep-specific error with a single except clause.
    """
    pass


class TargetError(NetsweepError):
    """Raised when a target specification cannot be resolved.
    
    The bulk runner catches this per target, records it and moves on
    to the next one.
    """
    
    def __init__(self, message: str, target: str | None = None):
        super().__init__(message)
        self.target = target


class MalformedTargetError(TargetError):
    """Raised when a target string is syntactically invalid.
    
    This includes:
    - Empty input
    - An ``ip,hostname`` pair that does not split into exactly two parts
    - A pair that carries neither an address nor a hostname
    """
    pass


class AmbiguousTargetError(MalformedTargetError):
    """Raised for ``cidr,hostname`` input when the policy is ``reject``."""
    pass


class LookupFailedError(TargetError):
    """Raised when name resolution for a hostname could not complete."""
    pass


class CIDRParseError(TargetError):
    """Raised when a CIDR block cannot be parsed."""
    pass


class ProbeError(NetsweepError):
    """Raised when a probe cannot be attempted at all (bad port, bad mode)."""
    pass


class ConfigError(NetsweepError):
    """Raised when a configuration file cannot be loaded."""
    pass
