# scanner/store.py
"""
Thread-safe, append-only collection of findings for a single scan.
"""

import threading
from typing import List, Union

from models import Finding, Severity


class FindingStore:
    """
    Ordered list of findings guarded by one lock.

    append() stamps the store's region on the finding and seals it before
    it becomes visible. Readers get snapshot copies, so a read racing an
    append may miss it but never sees a half-updated list.
    """

    def __init__(self, region: str):
        self.region = region
        self._findings: List[Finding] = []
        self._lock = threading.Lock()

    def append(self, finding: Finding) -> None:
        with self._lock:
            finding.seal(self.region)
            self._findings.append(finding)

    def all(self) -> List[Finding]:
        with self._lock:
            return list(self._findings)

    def filter(self, severity: Union[Severity, str]) -> List[Finding]:
        severity = Severity.parse(severity)
        with self._lock:
            return [f for f in self._findings if f.severity is severity]

    def __len__(self) -> int:
        with self._lock:
            return len(self._findings)
