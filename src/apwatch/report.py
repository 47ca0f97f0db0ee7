# src/apwatch/report.py
from dataclasses import dataclass, field
from datetime import datetime, timezone

from apwatch.models import ClassificationOutcome, Family, Severity

MODE_NORMAL = "normal"   # only high severity findings are reported
MODE_STRICT = "strict"   # all four buckets
MODES = (MODE_NORMAL, MODE_STRICT)


@dataclass
class Report:
    high: list[ClassificationOutcome] = field(default_factory=list)
    medium: list[ClassificationOutcome] = field(default_factory=list)
    low: list[ClassificationOutcome] = field(default_factory=list)
    info: list[ClassificationOutcome] = field(default_factory=list)
    authorized: int = 0
    known: int = 0
    new: int = 0
    lines_read: int = 0
    lines_skipped: int = 0

    def bucket(self, severity: Severity) -> list[ClassificationOutcome]:
        return getattr(self, severity.value)

    def add(self, outcome: ClassificationOutcome) -> None:
        self.bucket(outcome.severity).append(outcome)
        if outcome.family is Family.AUTHORIZED:
            self.authorized += 1
        elif outcome.family is Family.KNOWN:
            self.known += 1
        else:
            self.new += 1

    @property
    def total(self) -> int:
        return self.authorized + self.known + self.new

    def findings(self, mode: str = MODE_STRICT) -> dict[str, list[ClassificationOutcome]]:
        if mode not in MODES:
            raise ValueError(f"Unknown report mode: {mode}")
        if mode == MODE_NORMAL:
            return {Severity.HIGH.value: self.high}
        return {s.value: self.bucket(s) for s in Severity}

    def to_dict(self, mode: str = MODE_STRICT) -> dict:
        return {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "mode": mode,
            "counts": {
                "authorized": self.authorized,
                "known": self.known,
                "new": self.new,
                "total": self.total,
            },
            "scan": {"lines": self.lines_read, "skipped": self.lines_skipped},
            "findings": {
                sev: [o.to_dict() for o in items]
                for sev, items in self.findings(mode).items()
            },
        }
