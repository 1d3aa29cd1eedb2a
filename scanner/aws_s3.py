# scanner/aws_s3.py
"""
S3 scanning logic.

- Pure rule functions accept plain dicts (API responses) and return Findings.
- Live helpers call boto3 and return None when a per-bucket lookup fails.
- scan_s3 lists buckets and applies, per bucket:
  * default encryption presence (HIGH)
  * ACL grants to AllUsers / AuthenticatedUsers (CRITICAL, once per bucket)
  * versioning enabled (MEDIUM)
- Failing to list buckets aborts the check; a failing per-bucket lookup
  never does.
"""

import logging
from typing import Any, Dict, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from config import PUBLIC_GRANTEE_URIS
from models import Finding, ResourceType
from scanner.errors import CheckExecutionError

logger = logging.getLogger(__name__)

# --- Pure rule helpers -----------------------------------------------------

def encryption_is_configured(encryption: Optional[Dict[str, Any]]) -> bool:
    """
    True if a GetBucketEncryption response carries at least one rule.
    A missing response (lookup failed) counts as not configured.
    """
    if not encryption:
        return False
    config = encryption.get("ServerSideEncryptionConfiguration") or {}
    return bool(config.get("Rules"))

def first_public_grant(acl: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Return the first grant whose grantee is the AllUsers or
    AuthenticatedUsers global group, or None.
    """
    for grant in acl.get("Grants", []):
        grantee = grant.get("Grantee") or {}
        if grantee.get("URI") in PUBLIC_GRANTEE_URIS:
            return grant
    return None

def versioning_enabled(versioning: Dict[str, Any]) -> bool:
    return versioning.get("Status") == "Enabled"

def check_bucket_encryption(bucket_name: str, encryption: Optional[Dict[str, Any]]) -> List[Finding]:
    if encryption_is_configured(encryption):
        return []
    return [Finding.high(
        bucket_name,
        ResourceType.S3_BUCKET,
        "S3 Bucket Not Encrypted",
        f"Bucket '{bucket_name}' does not have server-side encryption enabled. "
        "Data at rest is not protected.",
    )]

def check_bucket_public_access(bucket_name: str, acl: Dict[str, Any]) -> List[Finding]:
    """
    At most one finding per bucket, however many public grants it has.
    """
    if first_public_grant(acl) is None:
        return []
    return [Finding.critical(
        bucket_name,
        ResourceType.S3_BUCKET,
        "S3 Bucket Publicly Accessible",
        f"Bucket '{bucket_name}' allows public access via ACL. "
        "This could expose sensitive data to the internet.",
    )]

def check_bucket_versioning(bucket_name: str, versioning: Dict[str, Any]) -> List[Finding]:
    if versioning_enabled(versioning):
        return []
    return [Finding.medium(
        bucket_name,
        ResourceType.S3_BUCKET,
        "S3 Bucket Versioning Disabled",
        f"Bucket '{bucket_name}' does not have versioning enabled. "
        "Cannot recover from accidental deletion or modification.",
    )]

# --- Live AWS helpers -----------------------------------------------------

def list_buckets_live(s3) -> List[str]:
    """
    List bucket names. Errors propagate to the caller.
    """
    resp = s3.list_buckets()
    return [b["Name"] for b in resp.get("Buckets", [])]

def get_bucket_encryption_live(s3, bucket_name: str) -> Optional[Dict[str, Any]]:
    """
    Return bucket encryption configuration or None if not set or not accessible.
    """
    try:
        return s3.get_bucket_encryption(Bucket=bucket_name)
    except (ClientError, BotoCoreError) as e:
        logger.debug("get_bucket_encryption(%s) failed: %s", bucket_name, e)
        return None

def get_bucket_acl_live(s3, bucket_name: str) -> Optional[Dict[str, Any]]:
    try:
        return s3.get_bucket_acl(Bucket=bucket_name)
    except (ClientError, BotoCoreError) as e:
        logger.debug("get_bucket_acl(%s) failed: %s", bucket_name, e)
        return None

def get_bucket_versioning_live(s3, bucket_name: str) -> Optional[Dict[str, Any]]:
    try:
        return s3.get_bucket_versioning(Bucket=bucket_name)
    except (ClientError, BotoCoreError) as e:
        logger.debug("get_bucket_versioning(%s) failed: %s", bucket_name, e)
        return None

# --- High-level scanning --------------------------------------------------

def scan_bucket(s3, bucket_name: str) -> List[Finding]:
    """
    Apply every bucket rule. Unreadable encryption counts as unencrypted;
    unreadable ACL or versioning skips that rule for this bucket.
    """
    findings: List[Finding] = []
    findings.extend(check_bucket_encryption(bucket_name, get_bucket_encryption_live(s3, bucket_name)))

    acl = get_bucket_acl_live(s3, bucket_name)
    if acl is not None:
        findings.extend(check_bucket_public_access(bucket_name, acl))

    versioning = get_bucket_versioning_live(s3, bucket_name)
    if versioning is not None:
        findings.extend(check_bucket_versioning(bucket_name, versioning))

    return findings

def scan_s3(session, store) -> None:
    """
    Check unit: list buckets and append bucket findings to store.
    """
    s3 = session.client("s3")
    logger.info("Scanning S3 buckets...")
    try:
        bucket_names = list_buckets_live(s3)
    except (ClientError, BotoCoreError) as e:
        raise CheckExecutionError("", f"failed to list S3 buckets: {e}") from e

    logger.info("Found %d S3 buckets", len(bucket_names))
    for name in bucket_names:
        for finding in scan_bucket(s3, name):
            store.append(finding)
