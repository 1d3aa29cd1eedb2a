# scanner/scanner.py
"""
Scanner orchestrates all security checks for one region.

- Owns the CloudSession and the FindingStore for the duration of a scan.
- run_sequential runs checks one by one and stops at the first failure.
- run_concurrent runs every check on its own thread, waits for all of them,
  and raises the first failure observed (completion order) once they are done.
- A Scanner runs exactly once; findings can be read any number of times after.
"""

import concurrent.futures
import logging
import threading
from enum import Enum
from typing import Callable, List, NamedTuple, Optional, Sequence, Union

from models import Finding, Severity
from scanner.aws_ec2 import scan_ebs_volumes, scan_security_groups
from scanner.aws_iam import scan_iam
from scanner.aws_s3 import scan_s3
from scanner.errors import AlreadyRunError, CheckExecutionError
from scanner.session import CloudSession, create_session
from scanner.store import FindingStore

logger = logging.getLogger(__name__)


class CheckUnit(NamedTuple):
    name: str
    run: Callable[[CloudSession, FindingStore], None]


DEFAULT_CHECKS = (
    CheckUnit("S3 scan", scan_s3),
    CheckUnit("Security Group scan", scan_security_groups),
    CheckUnit("IAM scan", scan_iam),
    CheckUnit("EBS scan", scan_ebs_volumes),
)


class ScanState(Enum):
    CREATED = "created"
    RUNNING = "running"
    COMPLETED = "completed"


class Scanner:
    def __init__(self, session: CloudSession, region: Optional[str] = None,
                 checks: Optional[Sequence[CheckUnit]] = None):
        self.session = session
        self.region = region or session.region
        if not self.region:
            raise ValueError("Scanner requires a region; none given and the session has none")
        self.checks: List[CheckUnit] = list(DEFAULT_CHECKS if checks is None else checks)
        self.store = FindingStore(self.region)
        self.state = ScanState.CREATED
        self._state_lock = threading.Lock()

    @classmethod
    def create(cls, region: Optional[str], profile: Optional[str] = None, verify: bool = True,
               checks: Optional[Sequence[CheckUnit]] = None) -> "Scanner":
        """
        Build the AWS session and return a Scanner with an empty store.
        Raises SessionCreationError if credentials, config or region are unusable.
        """
        session = create_session(region, profile=profile, verify=verify)
        return cls(session, region=session.region, checks=checks)

    def _start(self) -> None:
        with self._state_lock:
            if self.state is not ScanState.CREATED:
                raise AlreadyRunError(f"scanner already {self.state.value}; create a new Scanner per scan")
            self.state = ScanState.RUNNING

    def _finish(self) -> None:
        with self._state_lock:
            self.state = ScanState.COMPLETED

    def _run_check(self, check: CheckUnit) -> None:
        """
        Run one check, turning any failure into a named CheckExecutionError.
        """
        try:
            check.run(self.session, self.store)
        except CheckExecutionError as e:
            raise CheckExecutionError(check.name, e.cause) from e
        except Exception as e:
            raise CheckExecutionError(check.name, e) from e

    def run_sequential(self) -> None:
        """
        Run checks in registration order. The first failure aborts the rest;
        findings from earlier checks stay in the store.
        """
        self._start()
        logger.info("Starting AWS security scan (region=%s)", self.region)
        try:
            for check in self.checks:
                self._run_check(check)
        finally:
            self._finish()
        logger.info("Scan complete. Found %d issues.", len(self.store))

    def run_concurrent(self) -> None:
        """
        Launch every check on its own worker before waiting on any, then join
        them all. Failures never cancel siblings; the first one to complete
        is raised.
        """
        self._start()
        logger.info("Starting concurrent AWS security scan (region=%s)", self.region)
        errors: List[CheckExecutionError] = []
        try:
            with concurrent.futures.ThreadPoolExecutor(max_workers=max(1, len(self.checks))) as executor:
                futs = {executor.submit(self._run_check, check): check for check in self.checks}
                for fut in concurrent.futures.as_completed(futs):
                    try:
                        fut.result()
                    except CheckExecutionError as e:
                        logger.error("%s", e)
                        errors.append(e)
        finally:
            self._finish()

        if errors:
            raise errors[0]
        logger.info("Concurrent scan complete. Found %d issues.", len(self.store))

    def findings(self) -> List[Finding]:
        """Current findings, unsorted."""
        return self.store.all()

    def findings_by_severity(self, severity: Union[Severity, str]) -> List[Finding]:
        return self.store.filter(severity)

    def critical_findings(self) -> List[Finding]:
        return self.findings_by_severity(Severity.CRITICAL)
