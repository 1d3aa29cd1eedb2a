"""
Central configuration and tunable constants.

- Default AWS region can be overridden by CLI args or environment variables.
- Output formats and the critical-port table are centralized for easy tuning.
"""

# Credentials come from the environment (AWS Vault, instance role, shared
# config). We only need a region for boto3.Session(region_name=...).
DEFAULT_AWS_PROFILE = None
DEFAULT_AWS_REGION = "us-east-1"
REGION_ENV_VAR = "AWS_REGION"

# Output formats accepted by --output
OUTPUT_CONSOLE = "console"
OUTPUT_TABLE = "table"
OUTPUT_JSON = "json"
OUTPUT_CSV = "csv"
OUTPUT_HTML = "html"
OUTPUT_FORMATS = [OUTPUT_CONSOLE, OUTPUT_TABLE, OUTPUT_JSON, OUTPUT_CSV, OUTPUT_HTML]
DEFAULT_OUTPUT = OUTPUT_CONSOLE

# Ingress sources that mean "the entire internet"
UNRESTRICTED_IPV4 = "0.0.0.0/0"
UNRESTRICTED_IPV6 = "::/0"

# Ports that must never be reachable from anywhere, in reporting order
CRITICAL_PORTS = {
    22: "SSH",
    3389: "RDP",
    5432: "PostgreSQL",
    3306: "MySQL",
    1433: "SQL Server",
    27017: "MongoDB",
    6379: "Redis",
}
MIN_PORT = 0
MAX_PORT = 65535

# S3 ACL grantee URIs that make a bucket public
PUBLIC_GRANTEE_URIS = {
    "http://acs.amazonaws.com/groups/global/AllUsers",
    "http://acs.amazonaws.com/groups/global/AuthenticatedUsers",
}
