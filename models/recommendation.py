"""Recommendation returned by the recommendation engine for one check."""
from dataclasses import dataclass, field

from models.enums import Severity
from models.workloads import NO_CHANGE


def _int_or_no_change(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return NO_CHANGE


@dataclass
class FlaggedWorkload:
    name: str = ""
    severity: Severity = Severity.INFO
    cpu: int = NO_CHANGE        # suggested millicores
    memory: int = NO_CHANGE     # suggested MiB
    replicas: int = NO_CHANGE

    def to_dict(self):
        # "status" is the wire name the engine and the dashboard use.
        return {
            "name": self.name,
            "status": self.severity.value,
            "cpu": self.cpu,
            "memory": self.memory,
            "replicas": self.replicas,
        }

    @classmethod
    def from_dict(cls, d):
        return cls(
            name=str(d.get("name", "")),
            severity=Severity.parse(d.get("status", d.get("severity"))),
            cpu=_int_or_no_change(d.get("cpu", NO_CHANGE)),
            memory=_int_or_no_change(d.get("memory", NO_CHANGE)),
            replicas=_int_or_no_change(d.get("replicas", NO_CHANGE)),
        )


@dataclass
class Recommendation:
    message: str = ""
    namespaces: dict = field(default_factory=dict)  # namespace -> [FlaggedWorkload]

    @property
    def flagged_count(self):
        return sum(len(items) for items in self.namespaces.values())

    def iter_flagged(self):
        """Yield (namespace, FlaggedWorkload) pairs, namespaces in sorted order."""
        for namespace in sorted(self.namespaces):
            for item in self.namespaces[namespace]:
                yield namespace, item

    def to_dict(self):
        return {
            "message": self.message,
            "namespaces": {
                ns: [item.to_dict() for item in items]
                for ns, items in self.namespaces.items()
            },
        }

    @classmethod
    def from_dict(cls, d):
        if not isinstance(d, dict):
            raise ValueError(f"recommendation must be an object, got {type(d).__name__}")
        raw_namespaces = d.get("namespaces") or {}
        if not isinstance(raw_namespaces, dict):
            raise ValueError("recommendation 'namespaces' must be an object")
        namespaces = {}
        for ns, items in raw_namespaces.items():
            namespaces[str(ns)] = [
                FlaggedWorkload.from_dict(item)
                for item in (items or [])
                if isinstance(item, dict)
            ]
        return cls(message=str(d.get("message", "")), namespaces=namespaces)
