# scanner/aws_ec2.py
"""
EC2 scanning logic: security group ingress exposure and EBS volume encryption.

0.0.0.0/0 (or ::/0) means "the entire internet". An ingress permission open
to it is checked against the critical-port table in config.CRITICAL_PORTS:
one CRITICAL finding per exposed service, plus one more when the permission
covers every port. A single permission can therefore yield up to 8 findings.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from botocore.exceptions import BotoCoreError, ClientError

from config import CRITICAL_PORTS, MAX_PORT, MIN_PORT, UNRESTRICTED_IPV4, UNRESTRICTED_IPV6
from models import Finding, ResourceType
from scanner.errors import CheckExecutionError

logger = logging.getLogger(__name__)

ALL_PROTOCOLS = "-1"

# --- Pure rule helpers -----------------------------------------------------

def permission_port_range(permission: Dict[str, Any]) -> Tuple[int, int]:
    """
    (from_port, to_port) for an IpPermission. "All traffic" rules carry no
    ports and cover the whole range; other rules without ports cover none.
    """
    from_port = permission.get("FromPort")
    to_port = permission.get("ToPort")
    if from_port is None and to_port is None and str(permission.get("IpProtocol")) == ALL_PROTOCOLS:
        return MIN_PORT, MAX_PORT
    return int(from_port or 0), int(to_port or 0)

def unrestricted_source(permission: Dict[str, Any]) -> Optional[str]:
    """
    The internet-wide CIDR a permission allows, IPv4 first, or None.
    """
    if any(r.get("CidrIp") == UNRESTRICTED_IPV4 for r in permission.get("IpRanges", [])):
        return UNRESTRICTED_IPV4
    if any(r.get("CidrIpv6") == UNRESTRICTED_IPV6 for r in permission.get("Ipv6Ranges", [])):
        return UNRESTRICTED_IPV6
    return None

def check_public_ports(sg_id: str, sg_name: str, from_port: int, to_port: int,
                       source: str = UNRESTRICTED_IPV4) -> List[Finding]:
    findings: List[Finding] = []
    for port, service in CRITICAL_PORTS.items():
        if from_port <= port <= to_port:
            findings.append(Finding.critical(
                sg_id,
                ResourceType.SECURITY_GROUP,
                f"{service} Port Publicly Accessible",
                f"Security group '{sg_name}' ({sg_id}) allows {service} access (port {port}) "
                f"from the entire internet ({source}). This is a critical security risk.",
            ))

    if from_port == MIN_PORT and to_port == MAX_PORT:
        findings.append(Finding.critical(
            sg_id,
            ResourceType.SECURITY_GROUP,
            "All Ports Publicly Accessible",
            f"Security group '{sg_name}' ({sg_id}) allows ALL ports from anywhere. "
            "This is extremely dangerous.",
        ))
    return findings

def check_security_group(group: Dict[str, Any]) -> List[Finding]:
    """
    Evaluate every ingress permission of one DescribeSecurityGroups entry.
    """
    sg_id = group.get("GroupId", "unknown")
    sg_name = group.get("GroupName", "")
    findings: List[Finding] = []
    for permission in group.get("IpPermissions", []):
        source = unrestricted_source(permission)
        if source is None:
            continue
        from_port, to_port = permission_port_range(permission)
        findings.extend(check_public_ports(sg_id, sg_name, from_port, to_port, source))
    return findings

def check_volume_encryption(volume: Dict[str, Any]) -> List[Finding]:
    if volume.get("Encrypted"):
        return []
    volume_id = volume.get("VolumeId", "unknown")
    return [Finding.high(
        volume_id,
        ResourceType.EBS_VOLUME,
        "EBS Volume Not Encrypted",
        f"EBS volume '{volume_id}' is not encrypted. Data at rest and snapshots "
        "created from it are not protected.",
    )]

# --- Live AWS helpers -----------------------------------------------------

def list_security_groups_live(ec2) -> List[Dict[str, Any]]:
    groups: List[Dict[str, Any]] = []
    for page in ec2.get_paginator("describe_security_groups").paginate():
        groups.extend(page.get("SecurityGroups", []))
    return groups

def list_volumes_live(ec2) -> List[Dict[str, Any]]:
    volumes: List[Dict[str, Any]] = []
    for page in ec2.get_paginator("describe_volumes").paginate():
        volumes.extend(page.get("Volumes", []))
    return volumes

# --- High-level scanning --------------------------------------------------

def scan_security_groups(session, store) -> None:
    """
    Check unit: flag ingress rules that expose critical ports to the internet.
    """
    ec2 = session.client("ec2")
    logger.info("Scanning Security Groups...")
    try:
        groups = list_security_groups_live(ec2)
    except (ClientError, BotoCoreError) as e:
        raise CheckExecutionError("", f"failed to describe security groups: {e}") from e

    logger.info("Found %d security groups", len(groups))
    for group in groups:
        for finding in check_security_group(group):
            store.append(finding)

def scan_ebs_volumes(session, store) -> None:
    """
    Check unit: flag unencrypted EBS volumes.
    """
    ec2 = session.client("ec2")
    logger.info("Scanning EBS volumes...")
    try:
        volumes = list_volumes_live(ec2)
    except (ClientError, BotoCoreError) as e:
        raise CheckExecutionError("", f"failed to describe EBS volumes: {e}") from e

    logger.info("Found %d EBS volumes", len(volumes))
    for volume in volumes:
        for finding in check_volume_encryption(volume):
            store.append(finding)
