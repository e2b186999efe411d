"""Heuristic classification of hash strings by their structure."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Sequence


@dataclass(frozen=True)
class DetectionRule:
    family: str
    algorithm_id: Optional[str]
    confidence: int
    pattern: Pattern[str]


@dataclass(frozen=True)
class DetectionResult:
    family: str
    confidence: int
    algorithm_id: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "family": self.family,
            "confidence": self.confidence,
            "algorithmId": self.algorithm_id,
        }


UNKNOWN = DetectionResult(family="Unknown", confidence=0, algorithm_id=None)


def _rule(family: str, algorithm_id: Optional[str], confidence: int, pattern: str) -> DetectionRule:
    return DetectionRule(family, algorithm_id, confidence, re.compile(pattern, re.IGNORECASE))


# Most specific first; the first matching rule wins. MD5 and NTLM share the
# 32-hex shape, so without a hint the NTLM rule never wins.
DEFAULT_RULES: Sequence[DetectionRule] = (
    _rule("MySQL-SHA1", "mysql-sha1", 95, r"^\*[a-f0-9]{40}$"),
    _rule("MD5-Crypt", "md5-crypt", 95, r"^\$1\$[a-z0-9./]{0,8}\$[a-z0-9./]{22}$"),
    _rule("bcrypt", "bcrypt", 95, r"^\$2[ayb]\$[0-9]{2}\$[a-z0-9./]{53}$"),
    _rule("SHA-256-Crypt", "sha256-crypt", 95, r"^\$5\$(?:rounds=[0-9]+\$)?[a-z0-9./]{0,16}\$[a-z0-9./]{43}$"),
    _rule("SHA-512-Crypt", "sha512-crypt", 95, r"^\$6\$(?:rounds=[0-9]+\$)?[a-z0-9./]{0,16}\$[a-z0-9./]{86}$"),
    _rule("PBKDF2", "pbkdf2", 95, r"^\$pbkdf2(?:-sha[0-9]+)?\$[0-9]+\$[a-z0-9./+]*={0,2}\$[a-z0-9./+]+={0,2}$"),
    _rule(
        "Argon2",
        "argon2",
        95,
        r"^\$argon2(?:id|i|d)\$v=[0-9]+\$m=[0-9]+,t=[0-9]+,p=[0-9]+\$[a-z0-9./+]+\$[a-z0-9./+]+$",
    ),
    _rule("scrypt", "scrypt", 95, r"^\$scrypt\$[a-z0-9=,]+\$[a-z0-9./+]+\$[a-z0-9./+]+$"),
    _rule("yescrypt", "yescrypt", 95, r"^\$y\$[a-z0-9./+]+\$[a-z0-9./+]+\$[a-z0-9./+]+$"),
    _rule("NetNTLMv2", "netntlmv2", 90, r"^[a-f0-9]{32}:[a-f0-9]+$"),
    _rule("WPA-PMKID", "wpa-pmkid", 90, r"^[a-f0-9]{32}\*[a-f0-9]{12}\*[a-f0-9]{12}$"),
    _rule("MD5", "md5", 90, r"^[a-f0-9]{32}$"),
    _rule("NTLM", "ntlm", 60, r"^[a-f0-9]{32}$"),
    _rule("SHA1", "sha1", 90, r"^[a-f0-9]{40}$"),
    _rule("SHA224", "sha224", 90, r"^[a-f0-9]{56}$"),
    _rule("SHA256", "sha256", 90, r"^[a-f0-9]{64}$"),
    _rule("SHA384", "sha384", 90, r"^[a-f0-9]{96}$"),
    _rule("SHA512", "sha512", 90, r"^[a-f0-9]{128}$"),
)


class HashFormatDetector:
    """Ordered rule matcher; total over all inputs."""

    def __init__(self, rules: Sequence[DetectionRule] = DEFAULT_RULES) -> None:
        self._rules = tuple(rules)

    def candidates(self, value: Optional[str]) -> List[DetectionResult]:
        """Every rule matching ``value``, in priority order."""
        cleaned = (value or "").strip()
        if not cleaned:
            return []
        return [
            DetectionResult(rule.family, rule.confidence, rule.algorithm_id)
            for rule in self._rules
            if rule.pattern.match(cleaned)
        ]

    def detect(self, value: Optional[str], hint: Optional[str] = None) -> DetectionResult:
        """Best guess for ``value``.

        ``hint`` (a family name or algorithm id) selects among candidates
        that share a shape, e.g. ``hint="ntlm"`` for 32 hex characters.
        """
        matches = self.candidates(value)
        if not matches:
            return UNKNOWN
        if hint:
            wanted = hint.strip().lower()
            for match in matches:
                if wanted in (match.family.lower(), (match.algorithm_id or "").lower()):
                    return match
        return matches[0]


_DEFAULT_DETECTOR = HashFormatDetector()


def detect_hash_type(value: Optional[str], hint: Optional[str] = None) -> DetectionResult:
    return _DEFAULT_DETECTOR.detect(value, hint)
