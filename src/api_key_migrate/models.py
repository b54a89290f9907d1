from dataclasses import dataclass, field
from typing import Protocol
from abc import abstractmethod

from .errors import DeletionError, MigrationError


@dataclass(frozen=True)
class KeyRecord:
    id: str | None
    name: str | None
    value: str | None = field(default=None, repr=False)
    description: str | None = None
    enabled: bool = False

    @classmethod
    def from_api(cls, item: dict) -> "KeyRecord":
        """Build from an ``ApiKey`` shape as returned by API Gateway."""
        return cls(
            id=item.get("id"),
            name=item.get("name"),
            value=item.get("value"),
            description=item.get("description"),
            enabled=item.get("enabled", False),
        )


@dataclass(frozen=True)
class UsagePlanRecord:
    id: str
    name: str

    @classmethod
    def from_api(cls, item: dict) -> "UsagePlanRecord":
        return cls(id=item["id"], name=item.get("name", ""))


@dataclass(frozen=True)
class UsagePlanKeyRecord:
    """A key as listed through a usage plan.

    API Gateway does not return ``description`` or ``enabled`` here, so
    :meth:`to_key_record` cannot recover them.
    """

    id: str | None
    name: str | None
    value: str | None = field(default=None, repr=False)

    @classmethod
    def from_api(cls, item: dict) -> "UsagePlanKeyRecord":
        return cls(id=item.get("id"), name=item.get("name"), value=item.get("value"))

    def to_key_record(self) -> KeyRecord:
        """Lossy conversion: description becomes None and enabled becomes False."""
        return KeyRecord(id=self.id, name=self.name, value=self.value)


@dataclass
class ProvisioningOutcome:
    source_key: KeyRecord
    destination_key: KeyRecord | None = None
    error: MigrationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ProvisioningResult:
    outcomes: list[ProvisioningOutcome] = field(default_factory=list)

    @property
    def created(self) -> list[KeyRecord]:
        return [o.destination_key for o in self.outcomes if o.destination_key]

    @property
    def error(self) -> MigrationError | None:
        # Fail-fast: only the last outcome can carry an error
        if self.outcomes and not self.outcomes[-1].ok:
            return self.outcomes[-1].error
        return None


@dataclass
class AttachOutcome:
    key: KeyRecord
    plan_id: str
    error: MigrationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class AttachResult:
    outcomes: list[AttachOutcome] = field(default_factory=list)

    @property
    def attached(self) -> list[KeyRecord]:
        return [o.key for o in self.outcomes if o.ok]

    @property
    def error(self) -> MigrationError | None:
        if self.outcomes and not self.outcomes[-1].ok:
            return self.outcomes[-1].error
        return None


@dataclass
class DeletionReport:
    attempted: int = 0
    confirmed: int = 0
    errors: list[DeletionError] = field(default_factory=list)


class KeyStore(Protocol):
    @abstractmethod
    def list_keys(self, name_prefix: str | None = None) -> list[KeyRecord]: ...

    @abstractmethod
    def list_usage_plans(self) -> list[UsagePlanRecord]: ...

    @abstractmethod
    def list_usage_plan_keys(
        self, plan_id: str, name_prefix: str | None = None
    ) -> list[UsagePlanKeyRecord]: ...

    @abstractmethod
    def create_key(
        self, name: str, value: str, description: str = "", enabled: bool = False
    ) -> KeyRecord: ...

    @abstractmethod
    def attach_key_to_plan(self, plan_id: str, key_id: str) -> None: ...

    @abstractmethod
    def delete_key(self, key_id: str) -> None: ...
