from api_key_migrate.errors import PreconditionError
from api_key_migrate.models import (
    KeyRecord,
    ProvisioningOutcome,
    ProvisioningResult,
    UsagePlanKeyRecord,
    UsagePlanRecord,
)


def test_key_record_from_api():
    key = KeyRecord.from_api(
        {"id": "k1", "name": "a", "value": "v", "description": "d", "enabled": True}
    )
    assert key == KeyRecord("k1", "a", "v", "d", True)


def test_key_record_repr_hides_value():
    assert "s3cr3t" not in repr(KeyRecord("k1", "a", "s3cr3t"))


def test_usage_plan_key_conversion_is_lossy():
    plan_key = UsagePlanKeyRecord.from_api(
        {"id": "k1", "type": "API_KEY", "name": "a", "value": "v"}
    )

    key = plan_key.to_key_record()

    assert key.id == "k1"
    assert key.value == "v"
    assert key.description is None
    assert key.enabled is False


def test_usage_plan_from_api():
    assert UsagePlanRecord.from_api({"id": "p1", "name": "gold"}) == UsagePlanRecord("p1", "gold")


def test_provisioning_result_error_is_last_outcome():
    ok = ProvisioningOutcome(KeyRecord("k1", "a", "v"), KeyRecord("n1", "a", "v"))
    failed = ProvisioningOutcome(KeyRecord("k2", "b", None), error=PreconditionError("no value"))

    result = ProvisioningResult([ok, failed])

    assert result.created == [KeyRecord("n1", "a", "v")]
    assert isinstance(result.error, PreconditionError)
    assert ProvisioningResult([ok]).error is None
