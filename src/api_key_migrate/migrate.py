import logging
from collections import Counter
from dataclasses import dataclass, field

from botocore.exceptions import BotoCoreError, ClientError

from .config import MigrationConfig, RenameRule, transform_name
from .errors import DeletionError, MigrationError, PreconditionError, RemoteCallError
from .models import (
    AttachOutcome,
    AttachResult,
    DeletionReport,
    KeyRecord,
    KeyStore,
    ProvisioningOutcome,
    ProvisioningResult,
)

logger = logging.getLogger(__name__)

REMOTE_ERRORS = (ClientError, BotoCoreError)


@dataclass
class MigrationReport:
    source_keys: list[KeyRecord] = field(default_factory=list)
    provisioning: ProvisioningResult = field(default_factory=ProvisioningResult)
    attachment: AttachResult = field(default_factory=AttachResult)
    deletion: DeletionReport | None = None
    error: MigrationError | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class MigrationEngine:
    """Copies API keys from one account's store into another's.

    Phases run in a fixed order (enumerate, provision, attach, delete), one
    remote call at a time. Enumerate, provision and attach stop at the first
    failure and keep what was already done. Delete is best effort.
    """

    def __init__(self, source: KeyStore, destination: KeyStore):
        self.source = source
        self.destination = destination

    def enumerate(
        self, plan_id: str | None = None, name_prefix: str | None = None
    ) -> list[KeyRecord]:
        """Fetch the candidate keys, optionally through a usage plan.

        Raises:
            RemoteCallError: if any page fails. Nothing partial is returned.
        """
        try:
            if plan_id is None:
                keys = self.source.list_keys(name_prefix)
            else:
                plan_keys = self.source.list_usage_plan_keys(plan_id, name_prefix)
                logger.warning(
                    f"Keys listed through usage plan {plan_id} carry no description "
                    "or enabled flag; they will be created with an empty description "
                    "and disabled"
                )
                keys = [k.to_key_record() for k in plan_keys]
        except REMOTE_ERRORS as e:
            raise RemoteCallError("enumerate", plan_id or "account", e) from e

        duplicates = [i for i, n in Counter(k.id for k in keys).items() if n > 1]
        if duplicates:
            logger.warning(f"Source returned duplicate key ids: {duplicates}")

        logger.info(f"Found {len(keys)} api keys")
        return keys

    def plan(
        self, source_keys: list[KeyRecord], rule: RenameRule | None = None
    ) -> list[tuple[KeyRecord, str]]:
        """Pair each source key with the name it would get. No remote calls."""
        return [(key, transform_name(key.name or "", rule)) for key in source_keys]

    def provision(
        self, source_keys: list[KeyRecord], rule: RenameRule | None = None
    ) -> ProvisioningResult:
        """Create each key in the destination, stopping at the first failure.

        An empty ``name`` or ``value`` counts as missing and fails the key
        with a PreconditionError before any remote call is made for it.
        """
        result = ProvisioningResult()
        logger.info(f"Creating {len(source_keys)} api keys")

        for key in source_keys:
            outcome = ProvisioningOutcome(source_key=key)
            result.outcomes.append(outcome)

            if not key.name:
                outcome.error = PreconditionError(f"Source key {key.id} has no name")
                break
            if not key.value:
                outcome.error = PreconditionError(f"Source key {key.name!r} has no value")
                break

            name = transform_name(key.name, rule)
            try:
                outcome.destination_key = self.destination.create_key(
                    name=name,
                    value=key.value,
                    description=key.description or "",
                    enabled=key.enabled,
                )
            except REMOTE_ERRORS as e:
                outcome.error = RemoteCallError("create", key.name, e)
                break

            logger.info(
                f"Created {name} ({len(result.created)}/{len(source_keys)})"
            )

        if result.error:
            logger.error(
                f"Provisioning stopped after {len(result.created)} keys: {result.error}"
            )
        return result

    def attach(self, created_keys: list[KeyRecord], plan_id: str | None = None) -> AttachResult:
        """Add each created key to the destination usage plan, in order."""
        result = AttachResult()
        if plan_id is None:
            return result

        for key in created_keys:
            outcome = AttachOutcome(key=key, plan_id=plan_id)
            result.outcomes.append(outcome)

            if not key.id:
                outcome.error = PreconditionError(f"Created key {key.name!r} has no id")
                break
            try:
                self.destination.attach_key_to_plan(plan_id, key.id)
            except REMOTE_ERRORS as e:
                outcome.error = RemoteCallError("attach", f"{key.name} -> {plan_id}", e)
                break
            logger.info(f"Attached {key.name} to usage plan {plan_id}")

        if result.error:
            logger.error(
                f"Attaching stopped after {len(result.attached)} keys: {result.error}"
            )
        return result

    def delete_all(self, source_keys: list[KeyRecord]) -> DeletionReport:
        """Try to delete every source key. Failures are collected, not raised.

        ``attempted`` always equals ``len(source_keys)``; ``confirmed`` only
        counts calls that returned without error.
        """
        report = DeletionReport()
        for key in source_keys:
            report.attempted += 1
            if not key.id:
                report.errors.append(
                    DeletionError(None, key.name, PreconditionError("key has no id"))
                )
                continue
            try:
                self.source.delete_key(key.id)
            except REMOTE_ERRORS as e:
                logger.debug(f"Ignoring delete failure for {key.name}: {e}")
                report.errors.append(DeletionError(key.id, key.name, e))
                continue
            report.confirmed += 1

        logger.info(f"Deleted {report.attempted} keys")
        return report

    def run(self, config: MigrationConfig) -> MigrationReport:
        """Run every phase the config asks for and report what happened."""
        report = MigrationReport()

        try:
            report.source_keys = self.enumerate(
                config.source_usage_plan_id, config.name_prefix
            )
        except RemoteCallError as e:
            report.error = e
            return report

        report.provisioning = self.provision(report.source_keys, config.rename_rule)
        if report.provisioning.error:
            report.error = report.provisioning.error
            return report

        report.attachment = self.attach(
            report.provisioning.created, config.destination_usage_plan_id
        )
        if report.attachment.error:
            report.error = report.attachment.error
            return report

        if config.delete_source_after_migration:
            report.deletion = self.delete_all(report.source_keys)

        return report
