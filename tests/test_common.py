"""YAML config loading and scan source helpers."""

import subprocess

import pytest

from apwatch.capture import source
from apwatch.common import load_config, request_path
from apwatch.errors import SourceUnavailable


def test_load_config_resolves_relative_paths(tmp_path) -> None:
    cfg_path = tmp_path / "apwatch.yaml"
    cfg_path.write_text(
        "registry:\n  path: registry.ini\nreport:\n  path: /var/tmp/out.json\n  mode: normal\n",
        encoding="utf-8",
    )

    cfg = load_config(str(cfg_path))

    assert cfg["registry"]["path"] == str((tmp_path / "registry.ini").resolve())
    assert cfg["report"]["path"] == "/var/tmp/out.json"
    assert cfg["report"]["mode"] == "normal"
    assert cfg["logging"] == {}


def test_load_config_expands_env(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("APWATCH_DIR", str(tmp_path / "conf"))
    cfg_path = tmp_path / "apwatch.yaml"
    cfg_path.write_text("registry:\n  path: $APWATCH_DIR/aps.ini\n", encoding="utf-8")

    cfg = load_config(str(cfg_path))

    assert cfg["registry"]["path"] == str(tmp_path / "conf" / "aps.ini")


def test_empty_config_is_a_dict(tmp_path) -> None:
    cfg_path = tmp_path / "apwatch.yaml"
    cfg_path.write_text("", encoding="utf-8")

    assert load_config(str(cfg_path))["registry"] == {}


def test_config_must_be_mapping(tmp_path) -> None:
    cfg_path = tmp_path / "apwatch.yaml"
    cfg_path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(str(cfg_path))


def test_request_path() -> None:
    assert request_path("https://h.example") == "/"
    assert request_path("https://h.example/a/b?x=1") == "/a/b?x=1"


def test_scan_command_from_config() -> None:
    assert source.scan_command("iw wlp2s0 scan") == ["iw", "wlp2s0", "scan"]
    assert source.scan_command(["iw", "wlan1", "scan"]) == ["iw", "wlan1", "scan"]


def test_scan_command_uses_sudo_when_not_root(monkeypatch) -> None:
    monkeypatch.setattr(source.os, "geteuid", lambda: 1000)
    assert source.scan_command(iface="wlan1") == ["sudo", "-n", "iw", "wlan1", "scan"]

    monkeypatch.setattr(source.os, "geteuid", lambda: 0)
    assert source.scan_command() == ["iw", "wlan0", "scan"]


def test_run_scan_command_merges_stderr(monkeypatch) -> None:
    def fake_run(cmd, **kwargs):
        return subprocess.CompletedProcess(cmd, 0, stdout="BSS aa:11(on wlan0)\n", stderr="warn\n")

    monkeypatch.setattr(source.subprocess, "run", fake_run)

    assert source.run_scan_command(["iw", "wlan0", "scan"]) == "BSS aa:11(on wlan0)\nwarn\n"


def test_run_scan_command_failure(monkeypatch) -> None:
    def fake_run(cmd, **kwargs):
        return subprocess.CompletedProcess(cmd, 240, stdout="", stderr="command failed: Operation not permitted (-1)\n")

    monkeypatch.setattr(source.subprocess, "run", fake_run)

    with pytest.raises(SourceUnavailable, match="rc=240"):
        source.run_scan_command(["iw", "wlan0", "scan"])


def test_run_scan_command_timeout(monkeypatch) -> None:
    def fake_run(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

    monkeypatch.setattr(source.subprocess, "run", fake_run)

    with pytest.raises(SourceUnavailable, match="timed out"):
        source.run_scan_command(["iw", "wlan0", "scan"], timeout=1)


def test_run_scan_command_missing_binary() -> None:
    with pytest.raises(SourceUnavailable, match="not found"):
        source.run_scan_command(["apwatch-no-such-binary-xyz"])


def test_read_scan_file_missing(tmp_path) -> None:
    with pytest.raises(SourceUnavailable):
        source.read_scan_file(tmp_path / "missing.txt")


@pytest.mark.parametrize("section", ["scan", "registry", "report", "alerts", "logging"])
def test_config_sections_must_be_mappings(tmp_path, section) -> None:
    cfg_path = tmp_path / "apwatch.yaml"
    cfg_path.write_text(f"{section}: yes\n", encoding="utf-8")

    with pytest.raises(ValueError, match=section):
        load_config(str(cfg_path))


def test_missing_sections_default_to_empty(tmp_path) -> None:
    cfg_path = tmp_path / "apwatch.yaml"
    cfg_path.write_text("scan:\nreport:\n  mode: normal\n", encoding="utf-8")

    cfg = load_config(str(cfg_path))

    assert cfg["scan"] == {}
    assert cfg["alerts"] == {}
