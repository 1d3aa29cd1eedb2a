# scanner/session.py
"""
AWS session handling.

- create_session builds a boto3.Session and probes the credentials with
  sts:GetCallerIdentity, so bad credentials fail before any scanning.
- CloudSession hands out one cached client per service. boto3 sessions are
  not thread-safe but their clients are, so clients are built under a lock.
"""

import logging
import threading
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from scanner.errors import SessionCreationError

logger = logging.getLogger(__name__)


class CloudSession:
    """
    Read-only handle shared by every check during a scan.
    """

    def __init__(self, boto_session, region: Optional[str] = None, account: str = ""):
        self._session = boto_session
        self.region = region or boto_session.region_name
        self.account = account
        self._clients: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def client(self, service_name: str):
        with self._lock:
            if service_name not in self._clients:
                self._clients[service_name] = self._session.client(service_name, region_name=self.region)
            return self._clients[service_name]


def create_session(region: Optional[str], profile: Optional[str] = None, verify: bool = True) -> CloudSession:
    """
    Build a CloudSession for region.

    Credentials are resolved by boto3 (env vars, AWS Vault, shared config,
    instance role). Without region the profile's region is used. Any botocore
    failure, including an unknown profile or missing credentials, and a
    missing region are raised as SessionCreationError.
    """
    account = ""
    try:
        if profile:
            boto_session = boto3.Session(profile_name=profile, region_name=region)
        else:
            boto_session = boto3.Session(region_name=region)
        region = region or boto_session.region_name
        if not region:
            raise SessionCreationError("no AWS region configured; pass --region or set AWS_REGION")
        if verify:
            identity = boto_session.client("sts", region_name=region).get_caller_identity()
            account = identity.get("Account", "")
            logger.info("Authenticated as %s", identity.get("Arn", "unknown"))
    except (BotoCoreError, ClientError) as e:
        raise SessionCreationError(f"failed to create AWS session: {e}") from e
    return CloudSession(boto_session, region=region, account=account)
