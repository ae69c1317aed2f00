"""End to end tests of the check flow with a fake SNMP collector."""

import asyncio
import logging
import logging.handlers

import pytest

from conftest import FakeCollector, GB, jail_samples
from snmp_jails import main as main_module
from snmp_jails.check.plugin import Check
from snmp_jails.collectors.snmp_collector import SNMPConnectError, SNMPWalkError
from snmp_jails.core.config import LoggingConfig, ThresholdConfig
from snmp_jails.core.mib import JailMIB
from snmp_jails.main import build_config, main, parse_args, run_check, setup_logging


EXPECTED_PERFDATA = (
    "InOctets=1000c;;;; InPackets=20c;;;; OutOctets=3000c;;;; OutPackets=40c;;;; "
    "Processes=12;;;; Threads=34;;;; CpuTime=123.45s;;;; "
    "DiskSpace=5368709120b;3221225472;10737418240;; DiskFiles=5678;;;;"
)


def run(config, collector):
    with Check() as check:
        asyncio.run(run_check(config, check, collector))
    return check


class TestRunCheck:

    def test_warning_scenario(self, config, samples, capsys):
        collector = FakeCollector(samples)
        check = run(config, collector)

        assert check.exit_code == 1
        assert check.output == (
            "WARNING: Jail web is using 5 / 3 GB disk space (166%) | " + EXPECTED_PERFDATA
        )
        assert capsys.readouterr().out == check.output + "\n"
        assert collector.calls == ["connect", ("walk", JailMIB.BASE_OID), "close"]

    def test_no_thresholds_is_ok(self, config, samples):
        config.thresholds = ThresholdConfig(0, 0)
        check = run(config, FakeCollector(samples))

        assert check.exit_code == 0
        assert check.output.startswith("OK: Jail web is using 5 / 0 GB disk space | ")
        assert "DiskSpace=5368709120b;;;;" in check.output

    def test_critical_disk_usage(self, config):
        check = run(config, FakeCollector(jail_samples(disk_bytes=12 * GB)))
        assert check.exit_code == 2
        assert check.output.startswith("CRITICAL: Jail web is using 12 / 3 GB disk space (400%) | ")

    def test_missing_jail(self, config, samples):
        config.jail = "missing"
        collector = FakeCollector(samples)
        check = run(config, collector)

        assert check.exit_code == 2
        assert check.output == "CRITICAL: Jail missing not found"
        assert collector.closed

    def test_bad_jail_index(self, config):
        samples = {JailMIB.JAIL_NAME + ".abc": b"web"}
        check = run(config, FakeCollector(samples))
        assert check.exit_code == 3
        assert check.output.startswith("UNKNOWN: Can't determine jail index")

    def test_invalid_thresholds_before_network(self, config, samples):
        config.thresholds = ThresholdConfig(10, 5)
        collector = FakeCollector(samples)
        check = run(config, collector)

        assert check.exit_code == 3
        assert check.output == "UNKNOWN: Warning 10 can't be bigger than critical 5"
        assert collector.calls == []

    def test_connect_error(self, config, unreachable):
        check = run(config, unreachable)
        assert check.exit_code == 3
        assert check.output == "UNKNOWN: Connect err: No route to host"
        assert unreachable.calls == ["connect"]

    def test_walk_timeout(self, config):
        collector = FakeCollector(walk_error=SNMPConnectError("No SNMP response received before timeout"))
        check = run(config, collector)
        assert check.exit_code == 3
        assert check.output == "UNKNOWN: Connect err: No SNMP response received before timeout"
        assert collector.closed

    def test_walk_error(self, config):
        collector = FakeCollector(walk_error=SNMPWalkError("authorizationError at ?"))
        check = run(config, collector)
        assert check.exit_code == 3
        assert check.output == "UNKNOWN: Walk error: authorizationError at ?"
        assert collector.closed

    def test_empty_walk(self, config):
        check = run(config, FakeCollector({}))
        assert check.output == "CRITICAL: Jail web not found"


class TestParseArgs:

    def test_defaults(self):
        args = parse_args(["-H", "jailhost", "-j", "web"])
        assert args.hostname == "jailhost"
        assert args.jail == "web"
        assert args.port is None
        assert args.verbose == 0

    def test_all_options(self):
        args = parse_args([
            "--hostname", "jailhost", "--jail", "web", "-p", "161", "-C", "s3cret",
            "-t", "5s", "-w", "3", "-c", "10", "-vv",
        ])
        assert args.port == 161
        assert args.community == "s3cret"
        assert args.timeout == 5.0
        assert (args.warning, args.critical) == (3, 10)
        assert args.verbose == 2

    @pytest.mark.parametrize("argv", [
        ["-j", "web"],
        ["-H", "jailhost"],
        ["-H", "jailhost", "-j", "web", "-p", "70000"],
        ["-H", "jailhost", "-j", "web", "-w", "lots"],
        ["-H", "jailhost", "-j", "web", "-t", "soon"],
        ["-H", "jailhost", "-j", "web", "--bogus"],
    ])
    def test_usage_errors_exit_unknown(self, argv, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(argv)
        assert exc_info.value.code == 3
        assert "usage:" in capsys.readouterr().err


def test_build_config_cli_overrides_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "snmp:\n  community: fromfile\n  retries: 5\n"
        "thresholds:\n  warning: 1\n  critical: 2\n"
    )
    args = parse_args([
        "-H", "jailhost", "-j", "web", "-C", "fromcli", "-w", "3", "--config", str(path),
    ])
    config = build_config(args)

    assert config.host == "jailhost"
    assert config.jail == "web"
    assert config.snmp.community == "fromcli"
    assert config.snmp.retries == 5
    assert config.thresholds == ThresholdConfig(3, 2)


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.parametrize("verbose,level", [
    (0, logging.WARNING),
    (1, logging.INFO),
    (2, logging.DEBUG),
    (3, logging.DEBUG),
])
def test_setup_logging_verbosity(restore_logging, verbose, level):
    setup_logging(LoggingConfig(), verbose)
    assert restore_logging.level == level


def test_setup_logging_file(restore_logging, tmp_path):
    setup_logging(LoggingConfig(level="ERROR", file_path=str(tmp_path / "check.log")))
    assert restore_logging.level == logging.ERROR
    assert any(
        isinstance(h, logging.handlers.RotatingFileHandler) for h in restore_logging.handlers
    )


class TestMain:

    @pytest.fixture(autouse=True)
    def no_logging_setup(self, monkeypatch):
        monkeypatch.setattr(main_module, "setup_logging", lambda *args: None)

    def test_returns_exit_code(self, monkeypatch, tmp_path, samples, capsys):
        collectors = []

        def fake_collector(config):
            collectors.append(config)
            return FakeCollector(samples)

        monkeypatch.setattr(main_module, "make_collector", fake_collector)
        code = asyncio.run(main([
            "-H", "jailhost", "-j", "web", "-w", "3", "-c", "10",
            "--config", str(tmp_path / "none.yaml"),
        ]))

        assert code == 1
        assert capsys.readouterr().out.startswith("WARNING: Jail web is using 5 / 3 GB")
        assert collectors[0].snmp.port == 1161

    def test_bad_config_file(self, monkeypatch, tmp_path, capsys):
        path = tmp_path / "config.yaml"
        path.write_text("snmp:\n  colour: blue\n")
        monkeypatch.setattr(main_module, "make_collector", lambda config: FakeCollector())

        code = asyncio.run(main(["-H", "jailhost", "-j", "web", "--config", str(path)]))

        assert code == 3
        assert capsys.readouterr().out.startswith("UNKNOWN: Invalid config section")
