from .models import (
    KeyRecord,
    KeyStore,
    UsagePlanRecord,
    UsagePlanKeyRecord,
    ProvisioningOutcome,
    ProvisioningResult,
    AttachOutcome,
    AttachResult,
    DeletionReport,
)
from .migrate import MigrationEngine, MigrationReport
from .backends import ApiGatewayStore
from .config import (
    AwsCredentials,
    MigrationConfig,
    RenameRule,
    build_rename_rule,
    credentials_from_env,
    transform_name,
)
from .errors import (
    MigrationError,
    ConfigurationError,
    PreconditionError,
    RemoteCallError,
    DeletionError,
)

__all__ = [
    "KeyRecord",
    "KeyStore",
    "UsagePlanRecord",
    "UsagePlanKeyRecord",
    "ProvisioningOutcome",
    "ProvisioningResult",
    "AttachOutcome",
    "AttachResult",
    "DeletionReport",
    "MigrationEngine",
    "MigrationReport",
    "ApiGatewayStore",
    "AwsCredentials",
    "MigrationConfig",
    "RenameRule",
    "build_rename_rule",
    "credentials_from_env",
    "transform_name",
    "MigrationError",
    "ConfigurationError",
    "PreconditionError",
    "RemoteCallError",
    "DeletionError",
]
