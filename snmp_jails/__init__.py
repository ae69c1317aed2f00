"""Nagios check for per-jail resource counters read over SNMP."""

__version__ = "1.0.0"
