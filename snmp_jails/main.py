"""
check_snmp_jails - Main Entry Point.

Nagios/Icinga check that reads per-jail counters from a remote SNMP
agent and reports disk space usage of one jail together with its
network, process, CPU and disk counters as performance data.
"""

import argparse
import asyncio
import logging
import logging.handlers
import sys

from . import __version__
from .check.evaluator import JailIndexError, JailNotFoundError, evaluate_jail
from .check.plugin import Check
from .collectors.snmp_collector import JailSNMPCollector, SNMPConnectError, SNMPWalkError
from .core.config import CheckConfig, ConfigError, LoggingConfig, get_default_config_path, parse_duration
from .core.mib import JailMIB
from .core.models import Status


logger = logging.getLogger(__name__)


class PluginArgumentParser(argparse.ArgumentParser):
    """Argument parser that exits with UNKNOWN on usage errors."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(Status.UNKNOWN.value, f"{self.prog}: error: {message}\n")


def _port(value: str) -> int:
    port = int(value)
    if not 0 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port {port} out of range")
    return port


def _duration(value: str) -> float:
    try:
        return parse_duration(value)
    except ConfigError as e:
        raise argparse.ArgumentTypeError(str(e))


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = PluginArgumentParser(
        prog="check_snmp_jails",
        description="Check jail resource usage over SNMP"
    )

    parser.add_argument(
        "-H", "--hostname",
        required=True,
        help="Host name of the SNMP agent"
    )

    parser.add_argument(
        "-p", "--port",
        type=_port,
        default=None,
        help="SNMP port number (default: 1161)"
    )

    parser.add_argument(
        "-j", "--jail",
        required=True,
        help="Jail name"
    )

    parser.add_argument(
        "-C", "--community",
        default=None,
        help="SNMP community string (default: public)"
    )

    parser.add_argument(
        "-t", "--timeout",
        type=_duration,
        default=None,
        help="Connection timeout, e.g. 10s or 500ms (default: 10s)"
    )

    parser.add_argument(
        "-w", "--warning",
        type=int,
        default=None,
        help="Warning disk usage in GB (default: 0, disabled)"
    )

    parser.add_argument(
        "-c", "--critical",
        type=int,
        default=None,
        help="Critical disk usage in GB (default: 0, disabled)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Verbose output for debugging (repeat for more)"
    )

    parser.add_argument(
        "--config",
        default=None,
        help="Path to configuration file (YAML)"
    )

    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser.parse_args(argv)


def build_config(args) -> CheckConfig:
    """Load file and environment settings, then apply command line overrides."""
    config = CheckConfig.from_yaml(args.config or get_default_config_path())

    config.host = args.hostname
    config.jail = args.jail
    config.verbose = args.verbose
    if args.port is not None:
        config.snmp.port = args.port
    if args.community is not None:
        config.snmp.community = args.community
    if args.timeout is not None:
        config.snmp.timeout = args.timeout
    if args.warning is not None:
        config.thresholds.warning = args.warning
    if args.critical is not None:
        config.thresholds.critical = args.critical

    return config


def setup_logging(config: LoggingConfig, verbose: int = 0):
    """Log to stderr, stdout is reserved for the plugin output."""
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = getattr(logging, config.level.upper(), logging.WARNING)

    handlers = [logging.StreamHandler(sys.stderr)]
    if config.file_path:
        handlers.append(logging.handlers.RotatingFileHandler(
            config.file_path,
            maxBytes=config.max_file_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
        ))

    logging.basicConfig(level=level, format=config.format, handlers=handlers, force=True)


def make_collector(config: CheckConfig) -> JailSNMPCollector:
    return JailSNMPCollector(
        host=config.host,
        community=config.snmp.community,
        port=config.snmp.port,
        timeout=config.snmp.timeout,
        retries=config.snmp.retries,
        max_repetitions=config.snmp.max_repetitions,
    )


async def run_check(config: CheckConfig, check: Check, collector: JailSNMPCollector):
    """
    Run the check once and record the results on `check`.

    Ends early through `check.exit` on configuration, connection and
    lookup failures.
    """
    try:
        config.validate()
    except ConfigError as e:
        check.exit(Status.UNKNOWN, str(e))

    logger.debug(f"Options: {config}")

    try:
        await collector.connect()
    except SNMPConnectError as e:
        check.exit(Status.UNKNOWN, f"Connect err: {e}")

    try:
        try:
            samples = await collector.walk(JailMIB.BASE_OID)
        except SNMPConnectError as e:
            check.exit(Status.UNKNOWN, f"Connect err: {e}")
        except SNMPWalkError as e:
            check.exit(Status.UNKNOWN, f"Walk error: {e}")
    finally:
        collector.close()

    logger.info(f"Walk returned {len(samples)} items")

    try:
        outcome = evaluate_jail(samples, config.jail, config.thresholds)
    except JailIndexError as e:
        check.exit(Status.UNKNOWN, str(e))
    except JailNotFoundError as e:
        check.exit(Status.CRITICAL, str(e))

    for finding in outcome.findings:
        check.add_result(finding.status, finding.message)
    for metric in outcome.metrics:
        check.add_perf_datum(
            metric.name,
            metric.unit,
            metric.value,
            warn=metric.warn,
            crit=metric.crit,
            min=metric.min,
            max=metric.max,
        )

    logger.info(f"Jail {outcome.jail} (index {outcome.jail_index}): {outcome.status.name}")


async def main(argv=None) -> int:
    """Main entry point, returns the plugin exit code."""
    args = parse_args(argv)

    with Check() as check:
        try:
            config = build_config(args)
        except ConfigError as e:
            check.exit(Status.UNKNOWN, str(e))
        setup_logging(config.logging, config.verbose)
        await run_check(config, check, make_collector(config))

    return check.exit_code


def run():
    """Entry point for the application."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("UNKNOWN: Interrupted")
        sys.exit(Status.UNKNOWN.value)


if __name__ == "__main__":
    run()
