# src/apwatch/detectors/rogue_ap.py
"""Ordered rule table classifying one observed AP against the registry.

Rules are evaluated top to bottom and the first match wins. Later rules rely
on earlier ones not having matched (rule 7 would also cover rules 2 and 6).
"""
from dataclasses import dataclass
from typing import Callable

from apwatch.models import (
    AccessPointObservation, Category, ClassificationOutcome, Family, Severity,
)
from apwatch.registry import ProtectionLevel, Registry

Predicate = Callable[[str, str, Registry], bool]


@dataclass(frozen=True)
class Rule:
    number: int
    category: Category
    severity: Severity
    family: Family
    predicate: Predicate
    title: str

    def matches(self, obs: AccessPointObservation, reg: Registry) -> bool:
        return self.predicate(obs.bssid, obs.ssid, reg)

    def outcome(self, obs: AccessPointObservation) -> ClassificationOutcome:
        return ClassificationOutcome(
            rule=self.number,
            category=self.category,
            severity=self.severity,
            family=self.family,
            title=self.title.format(bssid=obs.bssid, ssid=obs.ssid),
            observation=obs,
        )


def _pair(mapping: dict, bssid: str, ssid: str) -> bool:
    return bssid in mapping and mapping[bssid] == ssid


def _protected(reg: Registry, ssid: str) -> bool:
    return reg.level(ssid) is ProtectionLevel.PROTECTED


RULES: tuple[Rule, ...] = (
    Rule(1, Category.AUTHORIZED_EXPECTED, Severity.INFO, Family.AUTHORIZED,
         lambda b, s, r: _pair(r.authorized, b, s) and _protected(r, s),
         "Authorized AP ({bssid}) broadcasts protected SSID ({ssid})"),
    Rule(2, Category.AUTHORIZED_SSID_MISMATCH, Severity.LOW, Family.AUTHORIZED,
         lambda b, s, r: b in r.authorized and r.authorized[b] != s and _protected(r, s),
         "Authorized AP ({bssid}) broadcasts wrong protected SSID ({ssid})"),
    Rule(3, Category.AUTHORIZED_UNKNOWN_SSID, Severity.LOW, Family.AUTHORIZED,
         lambda b, s, r: b in r.authorized and not r.is_registered(s),
         "Authorized AP ({bssid}) broadcasts unknown SSID ({ssid})"),
    Rule(4, Category.KNOWN_EXPECTED, Severity.INFO, Family.KNOWN,
         lambda b, s, r: _pair(r.known, b, s) and r.level(s) is ProtectionLevel.KNOWN_ONLY,
         "Known AP ({bssid}) broadcasts known SSID ({ssid})"),
    Rule(5, Category.KNOWN_UNKNOWN_SSID, Severity.LOW, Family.KNOWN,
         lambda b, s, r: b in r.known and not r.is_registered(s),
         "Known AP ({bssid}) broadcasts unknown SSID ({ssid})"),
    Rule(6, Category.KNOWN_PROTECTED_SSID, Severity.HIGH, Family.KNOWN,
         lambda b, s, r: _pair(r.known, b, s) and _protected(r, s),
         "Known AP ({bssid}) broadcasts protected SSID ({ssid})"),
    Rule(7, Category.UNAUTHORIZED_PROTECTED_SSID, Severity.HIGH, Family.NEW,
         lambda b, s, r: _protected(r, s) and not _pair(r.authorized, b, s),
         "Unauthorized AP ({bssid}) broadcasts protected SSID ({ssid})"),
    Rule(8, Category.UNAUTHORIZED_UNKNOWN_SSID, Severity.MEDIUM, Family.NEW,
         lambda b, s, r: not r.is_registered(s) and b not in r.known and b not in r.authorized,
         "Unauthorized AP ({bssid}) broadcasts unknown SSID ({ssid})"),
    Rule(9, Category.UNDEFINED_COMBINATION, Severity.MEDIUM, Family.NEW,
         lambda b, s, r: True,
         "Combination is not defined {bssid} -> {ssid}"),
)


def matching_rules(obs: AccessPointObservation, reg: Registry) -> list[Rule]:
    return [rule for rule in RULES if rule.matches(obs, reg)]


def classify(obs: AccessPointObservation, reg: Registry) -> ClassificationOutcome:
    for rule in RULES:
        if rule.matches(obs, reg):
            return rule.outcome(obs)
    raise AssertionError("catch-all rule did not match")  # pragma: no cover
