"""Severity tiers for flagged workloads."""
from enum import Enum


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def rank(self):
        return _SEVERITY_RANK[self]

    @classmethod
    def parse(cls, value):
        """Lenient parse: unknown or missing tiers count as INFO."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.INFO


_SEVERITY_RANK = {Severity.INFO: 0, Severity.WARNING: 1, Severity.CRITICAL: 2}
