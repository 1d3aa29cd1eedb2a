# scanner/aws_iam.py
"""
IAM scanning logic.

Users with console access (a login profile) should always have an MFA
device. Users without a login profile are skipped: MFA is meaningless for
API-only identities.
"""

import logging
from typing import Any, Dict, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from models import Finding, ResourceType
from scanner.errors import CheckExecutionError

logger = logging.getLogger(__name__)

# --- Pure rule helpers -----------------------------------------------------

def check_user_mfa(user_name: str, has_console_access: bool, mfa_devices: List[Dict[str, Any]]) -> List[Finding]:
    if not has_console_access or mfa_devices:
        return []
    return [Finding.high(
        user_name,
        ResourceType.IAM_USER,
        "IAM User Without MFA",
        f"IAM user '{user_name}' has console access but no MFA device configured. "
        "MFA provides critical additional security layer.",
    )]

def active_access_keys(keys: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [k for k in keys if k.get("Status") == "Active"]

# --- Live AWS helpers -----------------------------------------------------

def list_users_live(iam) -> List[Dict[str, Any]]:
    users: List[Dict[str, Any]] = []
    for page in iam.get_paginator("list_users").paginate():
        users.extend(page.get("Users", []))
    return users

def has_login_profile_live(iam, user_name: str) -> bool:
    """
    False when GetLoginProfile fails, NoSuchEntity included.
    """
    try:
        iam.get_login_profile(UserName=user_name)
        return True
    except (ClientError, BotoCoreError) as e:
        logger.debug("get_login_profile(%s) failed: %s", user_name, e)
        return False

def list_mfa_devices_live(iam, user_name: str) -> Optional[List[Dict[str, Any]]]:
    try:
        return iam.list_mfa_devices(UserName=user_name).get("MFADevices", [])
    except (ClientError, BotoCoreError) as e:
        logger.debug("list_mfa_devices(%s) failed: %s", user_name, e)
        return None

def list_access_keys_live(iam, user_name: str) -> Optional[List[Dict[str, Any]]]:
    try:
        return iam.list_access_keys(UserName=user_name).get("AccessKeyMetadata", [])
    except (ClientError, BotoCoreError) as e:
        logger.debug("list_access_keys(%s) failed: %s", user_name, e)
        return None

# --- High-level scanning --------------------------------------------------

def scan_user(iam, user_name: str) -> List[Finding]:
    findings: List[Finding] = []
    if has_login_profile_live(iam, user_name):
        devices = list_mfa_devices_live(iam, user_name)
        if devices is not None:
            findings.extend(check_user_mfa(user_name, True, devices))

    # Access keys are only classified; key age is not evaluated.
    keys = list_access_keys_live(iam, user_name)
    if keys:
        logger.debug("IAM user %s has %d active access keys", user_name, len(active_access_keys(keys)))
    return findings

def scan_iam(session, store) -> None:
    """
    Check unit: flag console users without MFA.
    """
    iam = session.client("iam")
    logger.info("Scanning IAM users...")
    try:
        users = list_users_live(iam)
    except (ClientError, BotoCoreError) as e:
        raise CheckExecutionError("", f"failed to list IAM users: {e}") from e

    logger.info("Found %d IAM users", len(users))
    for user in users:
        for finding in scan_user(iam, user["UserName"]):
            store.append(finding)
