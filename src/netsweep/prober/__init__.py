"""Prober module - Connection attempts with classified outcomes."""

from netsweep.prober.connect import ConnectProber

__all__ = [
    "ConnectProber",
]
