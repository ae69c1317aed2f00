"""Shared fixtures: walk results for a jail host and a fake SNMP collector."""

import pytest
from pysnmp.proto.rfc1902 import Counter32, Counter64, Gauge32, OctetString

from snmp_jails.collectors.snmp_collector import SNMPConnectError
from snmp_jails.core.config import CheckConfig, ThresholdConfig
from snmp_jails.core.mib import JailMIB


GB = 1024 ** 3


def jail_samples(disk_bytes=5 * GB):
    """Walk result with jails "db" (index 1) and "web" (index 3)."""
    return {
        JailMIB.jail_name_oid(1): OctetString("db"),
        JailMIB.jail_name_oid(3): OctetString("web"),
        JailMIB.counter_oid(10, 1): Counter64(1),
        JailMIB.counter_oid(30, 1): Counter64(100 * GB),
        JailMIB.counter_oid(10, 3): Counter64(1000),
        JailMIB.counter_oid(11, 3): Counter64(20),
        JailMIB.counter_oid(12, 3): Counter64(3000),
        JailMIB.counter_oid(13, 3): Counter64(40),
        JailMIB.counter_oid(20, 3): Gauge32(12),
        JailMIB.counter_oid(21, 3): Gauge32(34),
        JailMIB.counter_oid(25, 3): Counter32(12345),
        JailMIB.counter_oid(30, 3): Counter64(disk_bytes),
        JailMIB.counter_oid(31, 3): Gauge32(5678),
    }


class FakeCollector:
    """Stands in for JailSNMPCollector without touching the network."""

    def __init__(self, samples=None, connect_error=None, walk_error=None):
        self.samples = samples if samples is not None else {}
        self.connect_error = connect_error
        self.walk_error = walk_error
        self.calls = []
        self.closed = False

    async def connect(self):
        self.calls.append("connect")
        if self.connect_error:
            raise self.connect_error

    async def walk(self, oid):
        self.calls.append(("walk", oid))
        if self.walk_error:
            raise self.walk_error
        return dict(self.samples)

    def close(self):
        self.calls.append("close")
        self.closed = True


@pytest.fixture
def config():
    return CheckConfig(
        host="jailhost",
        jail="web",
        thresholds=ThresholdConfig(warning=3, critical=10),
    )


@pytest.fixture
def samples():
    return jail_samples()


@pytest.fixture
def unreachable():
    return FakeCollector(connect_error=SNMPConnectError("No route to host"))


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("SNMP_PORT", "SNMP_COMMUNITY", "SNMP_TIMEOUT", "SNMP_RETRIES", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
