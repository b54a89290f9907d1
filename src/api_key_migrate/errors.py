"""Error types raised (or collected) while migrating API keys."""


class MigrationError(Exception):
    """Base class for all migration failures."""


class ConfigurationError(MigrationError):
    """Invalid run configuration, detected before any remote call."""


class PreconditionError(MigrationError):
    """A record is missing a field the current phase needs."""


class RemoteCallError(MigrationError):
    """A call to API Gateway failed during enumerate, create or attach."""

    def __init__(self, phase: str, subject: str, cause: Exception):
        self.phase = phase
        self.subject = subject
        self.cause = cause
        super().__init__(f"{phase} failed for {subject!r}: {cause}")


class DeletionError(MigrationError):
    """A delete call failed. Collected in the deletion report, never raised."""

    def __init__(self, key_id: str | None, key_name: str | None, cause: Exception):
        self.key_id = key_id
        self.key_name = key_name
        self.cause = cause
        super().__init__(f"delete failed for {key_name!r} ({key_id}): {cause}")
