# src/apwatch/models.py
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


class Family(str, Enum):
    """Which run counter an outcome increments."""
    AUTHORIZED = "authorized"
    KNOWN = "known"
    NEW = "new"


class Category(str, Enum):
    AUTHORIZED_EXPECTED = "authorized_expected"
    AUTHORIZED_SSID_MISMATCH = "authorized_ssid_mismatch"
    AUTHORIZED_UNKNOWN_SSID = "authorized_unknown_ssid"
    KNOWN_EXPECTED = "known_expected"
    KNOWN_UNKNOWN_SSID = "known_unknown_ssid"
    KNOWN_PROTECTED_SSID = "known_protected_ssid"
    UNAUTHORIZED_PROTECTED_SSID = "unauthorized_protected_ssid"
    UNAUTHORIZED_UNKNOWN_SSID = "unauthorized_unknown_ssid"
    UNDEFINED_COMBINATION = "undefined_combination"


@dataclass(frozen=True)
class AccessPointObservation:
    bssid: str
    ssid: str = ""
    last_seen: Optional[str] = None
    freq: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "bssid": self.bssid,
            "ssid": self.ssid,
            "last_seen": self.last_seen,
            "freq": self.freq,
        }


@dataclass(frozen=True)
class ClassificationOutcome:
    rule: int
    category: Category
    severity: Severity
    family: Family
    title: str
    observation: AccessPointObservation

    def to_dict(self) -> dict:
        d = self.observation.to_dict()
        d.update({
            "title": self.title,
            "rule": self.rule,
            "category": self.category.value,
            "severity": self.severity.value,
        })
        return d
