"""
MIB Definitions for Jail Metrics.

Describes the OID layout the jail SNMP agent exposes and the fixed
table of per-jail counters this check reports.
"""

from typing import Tuple

from .models import CounterDescriptor


class JailMIB:
    """
    OID structure of the jail subtree.

    Base OID: .1.3.6.1.4.1.12325.1.1111

    Structure:
    .1.3.6.1.4.1.12325.1.1111
      └── .2 (jailTable)
            └── .1 (jailEntry)
                  ├── .1  (jailName)        .<jailIndex>
                  ├── .10 (jailInOctets)    .<jailIndex>
                  ├── .11 (jailInPackets)   .<jailIndex>
                  ├── .12 (jailOutOctets)   .<jailIndex>
                  ├── .13 (jailOutPackets)  .<jailIndex>
                  ├── .20 (jailProcesses)   .<jailIndex>
                  ├── .21 (jailThreads)     .<jailIndex>
                  ├── .25 (jailCpuTime)     .<jailIndex>  hundredths of a second
                  ├── .30 (jailDiskSpace)   .<jailIndex>  bytes
                  └── .31 (jailDiskFiles)   .<jailIndex>
    """

    BASE_OID = "1.3.6.1.4.1.12325.1.1111"

    JAIL_ENTRY = f"{BASE_OID}.2.1"
    JAIL_NAME = f"{JAIL_ENTRY}.1"

    # Counter ids that need special handling
    CPU_TIME = 25
    DISK_SPACE = 30

    COUNTERS: Tuple[CounterDescriptor, ...] = (
        CounterDescriptor(10, "InOctets", "c", "Octets received by the jail"),
        CounterDescriptor(11, "InPackets", "c", "Packets received by the jail"),
        CounterDescriptor(12, "OutOctets", "c", "Octets sent by the jail"),
        CounterDescriptor(13, "OutPackets", "c", "Packets sent by the jail"),
        CounterDescriptor(20, "Processes", "", "Number of processes"),
        CounterDescriptor(21, "Threads", "", "Number of threads"),
        CounterDescriptor(25, "CpuTime", "s", "CPU time in hundredths of a second"),
        CounterDescriptor(30, "DiskSpace", "b", "Disk space used in bytes"),
        CounterDescriptor(31, "DiskFiles", "", "Number of files on disk"),
    )

    @classmethod
    def counters(cls) -> Tuple[CounterDescriptor, ...]:
        """Counter descriptors in ascending counter id order."""
        return tuple(sorted(cls.COUNTERS, key=lambda c: c.counter_id))

    @classmethod
    def counter_oid(cls, counter_id: int, jail_index: int) -> str:
        return f"{cls.JAIL_ENTRY}.{counter_id}.{jail_index}"

    @classmethod
    def jail_name_oid(cls, jail_index: int) -> str:
        return f"{cls.JAIL_NAME}.{jail_index}"


def normalize_oid(oid_string: str) -> str:
    """Strip surrounding whitespace and the leading dot from an OID string."""
    return oid_string.strip().lstrip(".")


def oid_to_tuple(oid_string: str) -> tuple:
    """Convert OID string to tuple of integers."""
    return tuple(int(x) for x in oid_string.split(".") if x)
