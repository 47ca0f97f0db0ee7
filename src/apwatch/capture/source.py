# src/apwatch/capture/source.py
import os, pathlib, shlex, subprocess

from loguru import logger

from apwatch.errors import SourceUnavailable

DEFAULT_SCAN_COMMAND = ["iw", "wlan0", "scan"]


def scan_command(cfg_cmd=None, iface: str | None = None) -> list[str]:
    """Build the scan command: explicit config wins, else `iw <iface> scan` (sudo when not root)."""
    if cfg_cmd:
        return shlex.split(cfg_cmd) if isinstance(cfg_cmd, str) else [str(c) for c in cfg_cmd]
    cmd = ["iw", iface, "scan"] if iface else list(DEFAULT_SCAN_COMMAND)
    if os.geteuid() != 0:
        cmd = ["sudo", "-n"] + cmd
    return cmd


def run_scan_command(cmd: list[str], timeout: float = 30) -> str:
    """Run the scan command and return stdout followed by stderr."""
    logger.debug(f"scan: running {' '.join(cmd)}")
    try:
        p = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout, errors="replace")
    except FileNotFoundError as e:
        raise SourceUnavailable(f"Scan command not found: {cmd[0]}") from e
    except subprocess.TimeoutExpired as e:
        raise SourceUnavailable(f"Scan command timed out after {timeout}s") from e
    if p.returncode != 0:
        raise SourceUnavailable(f"Scan command failed (rc={p.returncode}): {p.stderr.strip()}")
    return p.stdout + p.stderr


def read_scan_file(path) -> str:
    p = pathlib.Path(path)
    try:
        return p.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise SourceUnavailable(f"Could not read scan file '{p}': {e}") from e
