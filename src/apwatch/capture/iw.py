# src/apwatch/capture/iw.py
"""Parser for `iw <iface> scan` dumps.

Output looks like::

    BSS 00:11:22:33:44:55(on wlan0) -- associated
            last seen: 1320 ms ago
            freq: 2412
            SSID: CorpNet

Each ``BSS`` header opens a block; the indented ``SSID:``, ``last seen:`` and
``freq:`` sub-lines fill it in. Every other line is counted as skipped.
"""
from enum import Enum
from typing import Iterable, Iterator, Optional
import re

from apwatch.models import AccessPointObservation

_BSS_RE = re.compile(r"^BSS\s+([^\s(]+)\(", re.IGNORECASE)
_SSID_RE = re.compile(r"^\s+SSID: (.*)$", re.IGNORECASE)
_LAST_SEEN_RE = re.compile(r"^\s+last seen:\s+(.*)$", re.IGNORECASE)
_FREQ_RE = re.compile(r"^\s+freq:\s+(\d+)(?:\.\d+)?$", re.IGNORECASE)


class ParserState(Enum):
    OUTSIDE = "outside"
    IN_BLOCK = "in_block"


class ScanParser:
    """Single-pass state machine turning scan lines into observations.

    ``flush_trailing`` controls the block still open at end of input: when
    True it is emitted, when False it is dropped, so a block is only closed
    by the next ``BSS`` header.
    """

    def __init__(self, flush_trailing: bool = True):
        self.flush_trailing = flush_trailing
        self.state = ParserState.OUTSIDE
        self.lines = 0
        self.skipped = 0
        self.emitted = 0
        self.dropped_trailing: Optional[AccessPointObservation] = None
        self._fields: dict = {}

    def _close(self) -> AccessPointObservation:
        obs = AccessPointObservation(**self._fields)
        self._fields = {}
        self.emitted += 1
        return obs

    def feed(self, line: str) -> Optional[AccessPointObservation]:
        """Consume one line; returns the observation closed by it, if any."""
        self.lines += 1
        line = line.rstrip("\r\n")

        m = _BSS_RE.match(line)
        if m:
            done = self._close() if self.state is ParserState.IN_BLOCK else None
            self._fields = {"bssid": m.group(1), "ssid": ""}
            self.state = ParserState.IN_BLOCK
            return done

        if self.state is ParserState.IN_BLOCK:
            m = _SSID_RE.match(line)
            if m:
                self._fields["ssid"] = m.group(1)
                return None
            m = _LAST_SEEN_RE.match(line)
            if m:
                self._fields["last_seen"] = m.group(1)
                return None
            m = _FREQ_RE.match(line)
            if m:
                self._fields["freq"] = int(m.group(1))
                return None

        self.skipped += 1
        return None

    def finish(self) -> Optional[AccessPointObservation]:
        """End of input. Returns the trailing block if it is to be emitted."""
        if self.state is not ParserState.IN_BLOCK:
            return None
        self.state = ParserState.OUTSIDE
        if self.flush_trailing:
            return self._close()
        self.dropped_trailing = AccessPointObservation(**self._fields)
        self._fields = {}
        return None

    def parse(self, lines: Iterable[str]) -> Iterator[AccessPointObservation]:
        for line in lines:
            obs = self.feed(line)
            if obs is not None:
                yield obs
        last = self.finish()
        if last is not None:
            yield last


def parse_scan(text: str, flush_trailing: bool = True) -> list[AccessPointObservation]:
    return list(ScanParser(flush_trailing=flush_trailing).parse(text.splitlines()))
