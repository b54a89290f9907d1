"""Tests for the API Gateway backend."""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ProfileNotFound

from api_key_migrate.backends.apigateway import ApiGatewayStore, create_client
from api_key_migrate.config import AwsCredentials
from api_key_migrate.errors import ConfigurationError
from api_key_migrate.models import KeyRecord, UsagePlanKeyRecord


class TestApiGatewayStore:
    """Tests for ApiGatewayStore with a mocked boto3 client."""

    @pytest.fixture
    def client(self):
        return MagicMock()

    @pytest.fixture
    def store(self, client):
        return ApiGatewayStore(client)

    def test_list_keys_joins_pages(self, store, client):
        client.get_paginator.return_value.paginate.return_value = [
            {"items": [{"id": "k1", "name": "svc-a", "value": "v1", "enabled": True}]},
            {"items": [{"id": "k2", "name": "svc-b", "value": "v2", "description": "d"}]},
            {},
        ]

        keys = store.list_keys("svc")

        client.get_paginator.assert_called_once_with("get_api_keys")
        client.get_paginator.return_value.paginate.assert_called_once_with(
            includeValues=True, nameQuery="svc"
        )
        assert keys == [
            KeyRecord("k1", "svc-a", "v1", None, True),
            KeyRecord("k2", "svc-b", "v2", "d", False),
        ]

    def test_list_keys_no_prefix(self, store, client):
        client.get_paginator.return_value.paginate.return_value = []

        assert store.list_keys() == []
        client.get_paginator.return_value.paginate.assert_called_once_with(
            includeValues=True, nameQuery=""
        )

    def test_list_usage_plan_keys(self, store, client):
        client.get_paginator.return_value.paginate.return_value = [
            {"items": [{"id": "k1", "type": "API_KEY", "name": "a", "value": "v"}]}
        ]

        keys = store.list_usage_plan_keys("plan-1", None)

        client.get_paginator.assert_called_once_with("get_usage_plan_keys")
        client.get_paginator.return_value.paginate.assert_called_once_with(
            usagePlanId="plan-1", nameQuery=""
        )
        assert keys == [UsagePlanKeyRecord("k1", "a", "v")]

    def test_list_usage_plans(self, store, client):
        client.get_paginator.return_value.paginate.return_value = [
            {"items": [{"id": "p1", "name": "gold"}, {"id": "p2", "name": "free"}]}
        ]

        plans = store.list_usage_plans()

        assert [p.name for p in plans] == ["gold", "free"]

    def test_create_key(self, store, client):
        client.create_api_key.return_value = {
            "id": "new1",
            "name": "app-a",
            "value": "v",
            "enabled": True,
            "ResponseMetadata": {},
        }

        key = store.create_key("app-a", "v", "", True)

        client.create_api_key.assert_called_once_with(
            name="app-a", value="v", description="", enabled=True
        )
        assert key.id == "new1"

    def test_attach_key_to_plan(self, store, client):
        store.attach_key_to_plan("plan-1", "new1")

        client.create_usage_plan_key.assert_called_once_with(
            usagePlanId="plan-1", keyId="new1", keyType="API_KEY"
        )

    def test_delete_key(self, store, client):
        store.delete_key("k1")

        client.delete_api_key.assert_called_once_with(apiKey="k1")


def test_create_client_with_static_keys():
    creds = AwsCredentials(
        region="eu-west-1",
        access_key_id="AKIA1",
        secret_access_key="shh",
        endpoint_url="http://localhost:4566",
    )

    with patch("boto3.Session") as session:
        create_client(creds)

    session.assert_called_once_with(
        region_name="eu-west-1",
        aws_access_key_id="AKIA1",
        aws_secret_access_key="shh",
        aws_session_token=None,
    )
    session.return_value.client.assert_called_once_with(
        "apigateway", endpoint_url="http://localhost:4566"
    )


def test_create_client_with_profile():
    creds = AwsCredentials(region="us-east-1", profile="dev")

    with patch("boto3.Session") as session:
        create_client(creds)

    session.assert_called_once_with(region_name="us-east-1", profile_name="dev")


def test_create_client_unknown_profile():
    creds = AwsCredentials(region="us-east-1", profile="nope")

    with patch("boto3.Session", side_effect=ProfileNotFound(profile="nope")):
        with pytest.raises(ConfigurationError) as exc:
            create_client(creds)

    assert "profile nope" in str(exc.value)
