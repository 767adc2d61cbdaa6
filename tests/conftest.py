"""Test configuration and fixtures for netsweep."""

import socket

import pytest

from netsweep.core.config import ResolverSettings, Settings
from netsweep.core.resolver import TargetResolver


LOOKUP_TABLE = {
    "example.com": ["93.184.216.34", "2606:2800:220:1:248:1893:25c8:1946"],
    "multi.example.com": ["10.1.1.1", "10.1.1.2", "10.1.1.3"],
    "v6only.example.com": ["2001:db8::1"],
}


def fake_lookup(hostname: str) -> list[str]:
    """Deterministic stand-in for the system resolver."""
    if hostname not in LOOKUP_TABLE:
        raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")
    return list(LOOKUP_TABLE[hostname])


@pytest.fixture
def settings() -> Settings:
    """Default settings for testing."""
    return Settings()


@pytest.fixture
def lookup():
    """The fake lookup function."""
    return fake_lookup


@pytest.fixture
def resolver() -> TargetResolver:
    """Resolver backed by the fake lookup table."""
    return TargetResolver(ResolverSettings(), lookup=fake_lookup)


@pytest.fixture
def permissive_resolver() -> TargetResolver:
    """Resolver that pairs CIDR blocks with hostnames instead of rejecting them."""
    return TargetResolver(
        ResolverSettings(ambiguous_policy="cidr_with_hostname"),
        lookup=fake_lookup,
    )


@pytest.fixture
def targets_file(tmp_path):
    """A target list mixing valid, malformed and commented lines."""
    path = tmp_path / "targets.txt"
    path.write_text(
        "# scan list\n"
        "10.0.0.1\n"
        "\n"
        "a,b,c\n"
        "  192.168.1.0/30  \n"
        "10.0.0.9, example.com\n"
    )
    return path


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Keep handlers installed by configure_logging from leaking between tests."""
    import logging

    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
