# src/apwatch/engine.py
from typing import Iterable

from loguru import logger

from apwatch.capture.iw import ScanParser
from apwatch.detectors.rogue_ap import classify, matching_rules
from apwatch.models import Severity
from apwatch.registry import Registry
from apwatch.report import Report

_LOG_LEVEL = {
    Severity.HIGH: "WARNING",
    Severity.MEDIUM: "INFO",
    Severity.LOW: "INFO",
    Severity.INFO: "DEBUG",
}


def evaluate(lines: Iterable[str], registry: Registry, *, flush_trailing: bool = True) -> Report:
    """Parse scan lines and classify every AP against the registry."""
    report = Report()
    parser = ScanParser(flush_trailing=flush_trailing)
    for obs in parser.parse(lines):
        outcome = classify(obs, registry)
        report.add(outcome)
        status = "ok" if outcome.severity is Severity.INFO else "not ok"
        logger.log(_LOG_LEVEL[outcome.severity], f"{status} - rule {outcome.rule}: {outcome.title}")
        also = [r.number for r in matching_rules(obs, registry) if r.number != outcome.rule]
        if also:
            logger.debug(f"rule {outcome.rule} for {obs.bssid} also matched: {also}")

    if parser.dropped_trailing is not None:
        logger.warning(f"scan: trailing block {parser.dropped_trailing.bssid} dropped (flush_trailing=False)")
    report.lines_read = parser.lines
    report.lines_skipped = parser.skipped
    logger.debug(f"scan: processed {parser.lines} lines, skipped {parser.skipped} lines")
    logger.info(
        f"Identified {report.authorized} authorized, {report.known} known and {report.new} new APs"
    )
    return report


def evaluate_text(text: str, registry: Registry, *, flush_trailing: bool = True) -> Report:
    return evaluate(text.splitlines(), registry, flush_trailing=flush_trailing)
