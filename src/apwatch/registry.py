# src/apwatch/registry.py
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable, Optional
import http.client, pathlib, re

from loguru import logger

from apwatch.common import open_connection, request_path
from apwatch.errors import MalformedLine, SourceUnavailable

SECTION_AUTHORIZED = "authorized"
SECTION_KNOWN = "known"

_SECTION_RE = re.compile(r"^\s*\[(.*)\]")
_ENTRY_RE = re.compile(r"^([0-9a-f:]+)=(.*)$", re.IGNORECASE)
_SKIP_RE = re.compile(r"^\s*(#|$)")


class ProtectionLevel(IntEnum):
    PROTECTED = 1
    KNOWN_ONLY = 2


@dataclass
class LoadStats:
    lines: int = 0            # content lines (comments and blanks excluded)
    entries: int = 0          # BSSIDs inserted into either mapping
    malformed: list[MalformedLine] = field(default_factory=list)
    unknown_section: int = 0
    conflicts: list[str] = field(default_factory=list)


class Registry:
    """Authorized and known BSSID -> SSID pairs plus per-SSID protection level.

    Both mappings and the level map are first-write-wins. A BSSID listed in
    both sections is kept in both; the classifier checks authorized first.
    """

    def __init__(self):
        self.authorized: dict[str, str] = {}
        self.known: dict[str, str] = {}
        self.levels: dict[str, ProtectionLevel] = {}

    def level(self, ssid: str) -> Optional[ProtectionLevel]:
        return self.levels.get(ssid)

    def is_registered(self, ssid: str) -> bool:
        return ssid in self.levels

    def add(self, section: str, bssid: str, ssid: str) -> bool:
        """Insert one entry; returns False when the BSSID is already in that section."""
        if section == SECTION_AUTHORIZED:
            mapping, level = self.authorized, ProtectionLevel.PROTECTED
        elif section == SECTION_KNOWN:
            mapping, level = self.known, ProtectionLevel.KNOWN_ONLY
        else:
            raise ValueError(f"unknown registry section: {section}")
        if bssid in mapping:
            return False
        mapping[bssid] = ssid
        self.levels.setdefault(ssid, level)
        return True

    def load(self, lines: Iterable[str]) -> LoadStats:
        stats = LoadStats()
        section = SECTION_AUTHORIZED
        for lineno, raw in enumerate(lines, start=1):
            line = raw.rstrip("\r\n")
            if _SKIP_RE.match(line):
                continue
            stats.lines += 1

            m = _SECTION_RE.match(line)
            if m:
                section = m.group(1).lower()
                logger.debug(f"registry: processing the [{section}] block")
                continue

            m = _ENTRY_RE.match(line)
            if not m:
                err = MalformedLine(lineno, line)
                stats.malformed.append(err)
                logger.warning(f"registry: {err}")
                continue

            bssid, ssid = m.group(1), m.group(2)
            if section not in (SECTION_AUTHORIZED, SECTION_KNOWN):
                stats.unknown_section += 1
                logger.info(f"registry: not ok - unknown block [{section}]: {bssid} -> {ssid}")
                continue
            if self.add(section, bssid, ssid):
                stats.entries += 1
                logger.debug(f"registry: add {bssid} -> {ssid} as {section}")
                if bssid in self.authorized and bssid in self.known:
                    stats.conflicts.append(bssid)
                    logger.warning(f"registry: {bssid} is listed as both authorized and known")
        logger.info(
            f"registry: processed {stats.lines} lines, inserted {stats.entries} APs"
            f" ({len(stats.malformed)} malformed)"
        )
        return stats


def load_registry(path) -> tuple[Registry, LoadStats]:
    p = pathlib.Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceUnavailable(f"Could not read registry file '{p}': {e}") from e
    reg = Registry()
    stats = reg.load(text.splitlines())
    return reg, stats


def fetch_registry(url: str, timeout: float = 10) -> tuple[Registry, LoadStats]:
    """Download registry text over HTTP(S) and load it."""
    try:
        conn = open_connection(url, timeout=timeout)
        try:
            conn.request("GET", request_path(url), headers={"Accept": "text/plain"})
            resp = conn.getresponse()
            body = resp.read()
        finally:
            conn.close()
    except (OSError, http.client.HTTPException, ValueError) as e:
        raise SourceUnavailable(f"Could not fetch registry from {url}: {e}") from e
    if resp.status >= 300:
        raise SourceUnavailable(f"Registry fetch failed: {resp.status}")
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise SourceUnavailable(f"Registry from {url} is not valid UTF-8") from e
    reg = Registry()
    stats = reg.load(text.splitlines())
    return reg, stats
