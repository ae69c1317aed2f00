"""
SNMP Collector for the Jail MIB.

Walks the jail subtree of a remote SNMP agent and returns the raw
varbinds keyed by numeric OID.
"""

import logging
from typing import Optional, Dict, Any

from pysnmp.hlapi.v3arch.asyncio import (
    bulk_walk_cmd,
    SnmpEngine,
    CommunityData,
    UdpTransportTarget,
    ContextData,
    ObjectType,
    ObjectIdentity,
)
from pysnmp.proto import errind

from ..core.mib import normalize_oid, oid_to_tuple


logger = logging.getLogger(__name__)


class SNMPError(Exception):
    """Raised when SNMP retrieval fails."""


class SNMPConnectError(SNMPError):
    """The agent could not be reached."""


class SNMPWalkError(SNMPError):
    """The agent answered the walk with an error."""


def to_int(value: Any) -> Optional[int]:
    """
    Normalize an SNMP value to a Python int.

    Integer32, Counter32, Counter64, Gauge32, TimeTicks and numeric
    strings all end up in the same integer domain. Returns None for
    values that carry no number (noSuchInstance, text, missing).
    """
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        pass
    try:
        return int(to_text(value).strip())
    except (TypeError, ValueError):
        logger.debug(f"Value {value!r} is not an integer")
        return None


def to_text(value: Any) -> str:
    """Decode an OctetString or bytes value to text."""
    if hasattr(value, "asOctets"):
        value = value.asOctets()
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


class JailSNMPCollector:
    """
    Reads the jail subtree from one remote SNMP agent.

    Uses SNMPv2c with a community string. Retries and timeouts are
    left to the pysnmp transport.
    """

    def __init__(
        self,
        host: str,
        community: str = "public",
        port: int = 1161,
        timeout: float = 10.0,
        retries: int = 3,
        max_repetitions: int = 50,
    ):
        self.host = host
        self.community = community
        self.port = port
        self.timeout = timeout
        self.retries = retries
        self.max_repetitions = max_repetitions
        self._engine: Optional[SnmpEngine] = None
        self._target: Optional[UdpTransportTarget] = None

    async def connect(self):
        """Set up the SNMP engine and the UDP transport to the agent."""
        self._engine = SnmpEngine()
        try:
            self._target = await UdpTransportTarget.create(
                (self.host, self.port),
                timeout=self.timeout,
                retries=self.retries,
            )
        except Exception as e:
            self.close()
            raise SNMPConnectError(str(e)) from e
        logger.debug(f"Connected to {self.host}:{self.port}")

    def close(self):
        """Release the engine dispatcher. Safe to call more than once."""
        if self._engine is not None:
            try:
                self._engine.close_dispatcher()
            except Exception as e:
                logger.debug(f"Error closing SNMP engine: {e}")
            self._engine = None
        self._target = None

    async def walk(self, oid: str) -> Dict[str, Any]:
        """Bulk walk an OID subtree and return values keyed by OID."""
        if self._engine is None or self._target is None:
            raise SNMPConnectError("Not connected")

        results = {}
        prefix = normalize_oid(oid) + "."

        async for errorIndication, errorStatus, errorIndex, varBinds in bulk_walk_cmd(
            self._engine,
            CommunityData(self.community, mpModel=1),  # SNMP v2c
            self._target,
            ContextData(),
            0,
            self.max_repetitions,
            ObjectType(ObjectIdentity(oid_to_tuple(oid))),
            lexicographicMode=False,
            lookupMib=False,
        ):
            if errorIndication:
                if isinstance(errorIndication, errind.RequestTimedOut):
                    raise SNMPConnectError(str(errorIndication))
                raise SNMPWalkError(str(errorIndication))
            if errorStatus:
                at = errorIndex and varBinds[int(errorIndex) - 1][0] or "?"
                raise SNMPWalkError(f"{errorStatus.prettyPrint()} at {at}")

            for name, value in varBinds:
                name = normalize_oid(str(name))
                # Agents may answer past the end of the subtree
                if not name.startswith(prefix):
                    continue
                results[name] = value

        logger.debug(f"Walk of {oid} returned {len(results)} items")
        return results
