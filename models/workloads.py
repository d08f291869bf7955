"""Dataclasses for collected workload resource usage."""
from dataclasses import dataclass, asdict
from typing import Optional

# Marker for "leave this value as it is" in usage data and recommendations.
NO_CHANGE = -1


@dataclass
class WorkloadUsage:
    name: str = ""
    owner_name: str = ""
    owner_kind: str = "None"
    cpu_request: int = 0        # millicores
    cpu_limit: int = 0          # millicores
    memory_request: int = 0     # MiB
    memory_limit: int = 0       # MiB
    cpu_usage: Optional[float] = None      # millicores
    memory_usage: Optional[float] = None   # MiB
    cpu_percentage: Optional[float] = None
    mem_percentage: Optional[float] = None
    replicas: int = NO_CHANGE

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, d):
        known = {k: v for k, v in d.items() if k in cls.__dataclass_fields__}
        return cls(**known)

    @property
    def has_usage(self):
        return self.cpu_usage is not None or self.memory_usage is not None
