# models.py
"""
Data models used by the scanner.

- Severity is a single canonical enum; declaration order is priority order.
- ResourceType tags the kind of AWS resource a finding refers to.
- Finding is a simple, serializable dataclass. The region is filled in by the
  FindingStore at append time, never by the check that created it.
"""

from dataclasses import FrozenInstanceError, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Union


class Severity(Enum):
    """
    Ordered risk classification. CRITICAL has the highest priority.
    """
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        """0 for CRITICAL through 3 for LOW; lower sorts first."""
        return list(Severity).index(self)

    @classmethod
    def parse(cls, value: Union["Severity", str]) -> "Severity":
        """
        Accept a Severity or its name in any casing ("critical", "Critical").
        Raise ValueError for anything else.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise ValueError(f"Invalid severity: {value!r}")

    def __str__(self) -> str:
        return self.value


class ResourceType(Enum):
    S3_BUCKET = "S3_BUCKET"
    SECURITY_GROUP = "SECURITY_GROUP"
    EBS_VOLUME = "EBS_VOLUME"
    IAM_USER = "IAM_USER"

    def __str__(self) -> str:
        return self.value


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Finding:
    """
    Represents a single security finding.

    Fields:
    - resource_id: provider identifier (bucket name, sg-..., vol-..., user name)
    - resource_type: ResourceType tag
    - severity: Severity (strings are coerced, anything else is rejected)
    - title: short human-readable label
    - description: free-text explanation useful for triage
    - region: scan region, overwritten by FindingStore.append
    - account: reserved for multi-account scans, currently never set
    - timestamp: creation time (UTC), set once

    Once a FindingStore has stamped it, a finding is sealed: assigning to any
    attribute raises dataclasses.FrozenInstanceError.
    """
    resource_id: str
    resource_type: ResourceType
    severity: Severity
    title: str
    description: str
    region: str = ""
    account: str = ""
    timestamp: datetime = field(default_factory=_utcnow)

    _sealed = False

    def __setattr__(self, name: str, value: Any) -> None:
        if self._sealed:
            raise FrozenInstanceError(f"cannot assign to field {name!r} of a stored finding")
        super().__setattr__(name, value)

    def seal(self, region: str) -> None:
        """Stamp the scan region and make the finding read-only."""
        object.__setattr__(self, "region", region)
        object.__setattr__(self, "_sealed", True)

    def __post_init__(self):
        self.severity = Severity.parse(self.severity)
        if not isinstance(self.resource_type, ResourceType):
            self.resource_type = ResourceType(self.resource_type)
        if not self.title:
            raise ValueError("Finding title must not be empty")
        if not self.description:
            raise ValueError("Finding description must not be empty")

    @classmethod
    def critical(cls, resource_id: str, resource_type: ResourceType, title: str, description: str) -> "Finding":
        return cls(resource_id, resource_type, Severity.CRITICAL, title, description)

    @classmethod
    def high(cls, resource_id: str, resource_type: ResourceType, title: str, description: str) -> "Finding":
        return cls(resource_id, resource_type, Severity.HIGH, title, description)

    @classmethod
    def medium(cls, resource_id: str, resource_type: ResourceType, title: str, description: str) -> "Finding":
        return cls(resource_id, resource_type, Severity.MEDIUM, title, description)

    @classmethod
    def low(cls, resource_id: str, resource_type: ResourceType, title: str, description: str) -> "Finding":
        return cls(resource_id, resource_type, Severity.LOW, title, description)

    def to_dict(self) -> Dict[str, Any]:
        """
        Serializable form with enum values as strings and an ISO-8601
        timestamp that carries its UTC offset.
        """
        return {
            "resource_id": self.resource_id,
            "resource_type": self.resource_type.value,
            "severity": self.severity.value,
            "title": self.title,
            "description": self.description,
            "region": self.region,
            "account": self.account,
            "timestamp": self.timestamp.isoformat(),
        }
