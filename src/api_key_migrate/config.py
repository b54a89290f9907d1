import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field

from .errors import ConfigurationError

SOURCE_ENV_PREFIX = "SOURCE_"
DESTINATION_ENV_PREFIX = "DESTINATION_"

# Suggested when prompting; any region name is accepted
AWS_REGIONS = [
    "us-east-1",
    "us-east-2",
    "us-west-1",
    "us-west-2",
    "af-south-1",
    "ap-east-1",
    "ap-south-1",
    "ap-south-2",
    "ap-southeast-1",
    "ap-southeast-2",
    "ap-southeast-3",
    "ap-southeast-4",
    "ap-northeast-1",
    "ap-northeast-2",
    "ap-northeast-3",
    "ca-central-1",
    "ca-west-1",
    "eu-central-1",
    "eu-central-2",
    "eu-west-1",
    "eu-west-2",
    "eu-west-3",
    "eu-south-1",
    "eu-south-2",
    "eu-north-1",
    "il-central-1",
    "me-south-1",
    "me-central-1",
    "sa-east-1",
]


@dataclass(frozen=True)
class AwsCredentials:
    """Everything needed to open an API Gateway client for one account.

    Either a named ``profile`` or a static key pair is used. ``endpoint_url``
    points the client at something other than AWS, e.g. LocalStack.
    """

    region: str
    access_key_id: str | None = None
    secret_access_key: str | None = field(default=None, repr=False)
    session_token: str | None = field(default=None, repr=False)
    profile: str | None = None
    endpoint_url: str | None = None

    def __post_init__(self):
        if not self.region:
            raise ConfigurationError("An AWS region is required")
        if not self.profile and not (self.access_key_id and self.secret_access_key):
            raise ConfigurationError(
                "Credentials need either a profile or an access key id and secret"
            )

    def describe(self) -> str:
        """Short summary safe to print or log."""
        who = f"profile {self.profile}" if self.profile else f"key {self.access_key_id}"
        where = f" via {self.endpoint_url}" if self.endpoint_url else ""
        return f"{who} in {self.region}{where}"


def credentials_from_env(
    prefix: str, environ: Mapping[str, str] | None = None
) -> AwsCredentials | None:
    """Read ``<prefix>AWS_*`` variables. Returns None if nothing is set."""
    env = os.environ if environ is None else environ

    def get(name: str) -> str | None:
        return env.get(f"{prefix}{name}") or None

    access_key_id = get("AWS_ACCESS_KEY_ID")
    profile = get("AWS_PROFILE")
    if not access_key_id and not profile:
        return None

    region = get("AWS_REGION")
    if not region:
        raise ConfigurationError(f"{prefix}AWS_REGION is not set")

    return AwsCredentials(
        region=region,
        access_key_id=access_key_id,
        secret_access_key=get("AWS_SECRET_ACCESS_KEY"),
        session_token=get("AWS_SESSION_TOKEN"),
        profile=profile,
        endpoint_url=get("AWS_ENDPOINT_URL"),
    )


@dataclass(frozen=True)
class RenameRule:
    pattern: re.Pattern
    replacement: str

    @classmethod
    def compile(cls, pattern: str, replacement: str = "") -> "RenameRule":
        try:
            compiled = re.compile(pattern)
        except re.error as e:
            raise ConfigurationError(f"Invalid rename pattern {pattern!r}: {e}") from e
        return cls(compiled, replacement)


def build_rename_rule(
    pattern: str | None, replacement: str | None
) -> RenameRule | None:
    """Compile the optional rename rule from raw pattern/replacement strings."""
    if not pattern:
        if replacement:
            raise ConfigurationError("A replacement was given without a pattern")
        return None
    rule = RenameRule.compile(pattern, replacement or "")
    # re parses the replacement template eagerly, so bad group refs fail here
    try:
        rule.pattern.sub(rule.replacement, "", count=1)
    except re.error as e:
        raise ConfigurationError(f"Invalid replacement {replacement!r}: {e}") from e
    return rule


def transform_name(name: str, rule: RenameRule | None = None) -> str:
    """Rewrite the first match of the rule's pattern. Later matches are kept."""
    if rule is None:
        return name
    return rule.pattern.sub(rule.replacement, name, count=1)


@dataclass
class MigrationConfig:
    source: AwsCredentials | None = None
    destination: AwsCredentials | None = None
    name_prefix: str | None = None
    rename_rule: RenameRule | None = None
    source_usage_plan_id: str | None = None
    destination_usage_plan_id: str | None = None
    delete_source_after_migration: bool = False
