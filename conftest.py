# conftest.py
"""
Shared pytest fixtures.

- aws_credentials: fake credentials so boto3/moto never touch a real account.
- fake_session: an in-memory stand-in for CloudSession whose clients serve
  canned API responses. Used where tests need exact control over data and
  failures (and thread-safe reads for concurrent runs).
"""

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

# Fake-client value: the lookup fails at the transport layer, not with an API error.
UNREACHABLE = "unreachable"


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.delenv("AWS_PROFILE", raising=False)


def client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": f"{code} (fake)"}}, operation)


def endpoint_error(service: str) -> EndpointConnectionError:
    return EndpointConnectionError(endpoint_url=f"https://{service}.amazonaws.com")


class FakePaginator:
    def __init__(self, pages):
        self._pages = pages

    def paginate(self, **kwargs):
        if isinstance(self._pages, Exception):
            raise self._pages
        return iter(self._pages)


class FakeS3:
    """
    buckets: {name: {"encryption": dict|None, "acl": dict|None, "versioning": dict|None}}
    None means the lookup fails with a ClientError, UNREACHABLE with an
    EndpointConnectionError.
    """

    def __init__(self, buckets, fail_listing=False):
        self.buckets = buckets
        self.fail_listing = fail_listing

    def _lookup(self, bucket, key, operation):
        value = self.buckets[bucket].get(key)
        if value is None:
            raise client_error("AccessDenied", operation)
        if value == UNREACHABLE:
            raise endpoint_error("s3")
        return value

    def list_buckets(self):
        if self.fail_listing:
            raise client_error("AccessDenied", "ListBuckets")
        return {"Buckets": [{"Name": name} for name in self.buckets]}

    def get_bucket_encryption(self, Bucket):
        return self._lookup(Bucket, "encryption", "GetBucketEncryption")

    def get_bucket_acl(self, Bucket):
        return self._lookup(Bucket, "acl", "GetBucketAcl")

    def get_bucket_versioning(self, Bucket):
        return self._lookup(Bucket, "versioning", "GetBucketVersioning")


class FakeEC2:
    def __init__(self, groups=(), volumes=(), fail_listing=False):
        self.groups = list(groups)
        self.volumes = list(volumes)
        self.fail_listing = fail_listing

    def get_paginator(self, operation):
        if self.fail_listing:
            return FakePaginator(client_error("UnauthorizedOperation", operation))
        if operation == "describe_security_groups":
            return FakePaginator([{"SecurityGroups": self.groups}])
        if operation == "describe_volumes":
            return FakePaginator([{"Volumes": self.volumes}])
        raise AssertionError(f"unexpected paginator {operation}")


class FakeIAM:
    """
    users: {name: {"login_profile": bool, "mfa_devices": list|None, "access_keys": list|UNREACHABLE}}
    """

    def __init__(self, users, fail_listing=False):
        self.users = users
        self.fail_listing = fail_listing

    def get_paginator(self, operation):
        if self.fail_listing:
            return FakePaginator(client_error("AccessDenied", operation))
        return FakePaginator([{"Users": [{"UserName": name} for name in self.users]}])

    def get_login_profile(self, UserName):
        if not self.users[UserName].get("login_profile"):
            raise client_error("NoSuchEntity", "GetLoginProfile")
        return {"LoginProfile": {"UserName": UserName}}

    def list_mfa_devices(self, UserName):
        devices = self.users[UserName].get("mfa_devices", [])
        if devices is None:
            raise client_error("AccessDenied", "ListMFADevices")
        return {"MFADevices": devices}

    def list_access_keys(self, UserName):
        keys = self.users[UserName].get("access_keys", [])
        if keys == UNREACHABLE:
            raise endpoint_error("iam")
        return {"AccessKeyMetadata": keys}


class FakeSession:
    def __init__(self, region="us-east-1", **clients):
        self.region = region
        self.account = ""
        self._clients = clients

    def client(self, service_name):
        return self._clients[service_name]


PUBLIC_READ_GRANT = {
    "Grantee": {"Type": "Group", "URI": "http://acs.amazonaws.com/groups/global/AllUsers"},
    "Permission": "READ",
}
AUTH_READ_GRANT = {
    "Grantee": {"Type": "Group", "URI": "http://acs.amazonaws.com/groups/global/AuthenticatedUsers"},
    "Permission": "READ",
}
ENCRYPTED = {"ServerSideEncryptionConfiguration": {"Rules": [
    {"ApplyServerSideEncryptionByDefault": {"SSEAlgorithm": "AES256"}}
]}}


def sample_clients(fail_ec2=False):
    """
    A small account: one public, unversioned, unencrypted bucket; one clean
    bucket; an SG with SSH open to the world; a console user without MFA;
    an API-only user; one unencrypted volume. Six findings, two CRITICAL.
    """
    s3 = FakeS3({
        "public-bucket": {"encryption": None, "acl": {"Grants": [PUBLIC_READ_GRANT, AUTH_READ_GRANT]},
                          "versioning": {}},
        "private-bucket": {"encryption": ENCRYPTED, "acl": {"Grants": []}, "versioning": {"Status": "Enabled"}},
    })
    ec2 = FakeEC2(
        groups=[{
            "GroupId": "sg-0123",
            "GroupName": "web",
            "IpPermissions": [{"IpProtocol": "tcp", "FromPort": 22, "ToPort": 22,
                               "IpRanges": [{"CidrIp": "0.0.0.0/0"}]}],
        }],
        volumes=[{"VolumeId": "vol-0abc", "Encrypted": False}],
        fail_listing=fail_ec2,
    )
    iam = FakeIAM({
        "alice": {"login_profile": True, "mfa_devices": []},
        "ci-bot": {"login_profile": False, "mfa_devices": [],
                   "access_keys": [{"AccessKeyId": "AKIAFAKE", "Status": "Active"}]},
    })
    return {"s3": s3, "ec2": ec2, "iam": iam}


@pytest.fixture
def fake_session():
    return FakeSession(**sample_clients())
