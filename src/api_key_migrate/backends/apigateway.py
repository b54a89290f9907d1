"""API Gateway backend for key migration."""

import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError

from ..config import AwsCredentials
from ..errors import ConfigurationError
from ..models import KeyRecord, UsagePlanKeyRecord, UsagePlanRecord

logger = logging.getLogger(__name__)


def create_client(credentials: AwsCredentials) -> Any:
    """Create an ``apigateway`` client for one account."""
    session_kwargs: dict[str, Any] = {"region_name": credentials.region}
    if credentials.profile:
        session_kwargs["profile_name"] = credentials.profile
    else:
        session_kwargs["aws_access_key_id"] = credentials.access_key_id
        session_kwargs["aws_secret_access_key"] = credentials.secret_access_key
        session_kwargs["aws_session_token"] = credentials.session_token

    logger.debug(f"Opening API Gateway session with {credentials.describe()}")
    try:
        session = boto3.Session(**session_kwargs)
        return session.client("apigateway", endpoint_url=credentials.endpoint_url)
    except BotoCoreError as e:
        raise ConfigurationError(
            f"Cannot open API Gateway client with {credentials.describe()}: {e}"
        ) from e


class ApiGatewayStore:
    """KeyStore implementation backed by a boto3 API Gateway client.

    botocore ``ClientError``/``BotoCoreError`` propagate unchanged. The
    migration engine decides what is fatal.
    """

    def __init__(self, client: Any):
        self.client = client

    @classmethod
    def from_credentials(cls, credentials: AwsCredentials) -> "ApiGatewayStore":
        return cls(create_client(credentials))

    def _paginate(self, operation: str, **kwargs: Any) -> list[dict]:
        paginator = self.client.get_paginator(operation)
        items: list[dict] = []
        for page in paginator.paginate(**kwargs):
            items.extend(page.get("items", []))
        logger.debug(f"{operation} returned {len(items)} items")
        return items

    def list_keys(self, name_prefix: str | None = None) -> list[KeyRecord]:
        items = self._paginate(
            "get_api_keys", includeValues=True, nameQuery=name_prefix or ""
        )
        return [KeyRecord.from_api(item) for item in items]

    def list_usage_plans(self) -> list[UsagePlanRecord]:
        return [UsagePlanRecord.from_api(item) for item in self._paginate("get_usage_plans")]

    def list_usage_plan_keys(
        self, plan_id: str, name_prefix: str | None = None
    ) -> list[UsagePlanKeyRecord]:
        items = self._paginate(
            "get_usage_plan_keys", usagePlanId=plan_id, nameQuery=name_prefix or ""
        )
        return [UsagePlanKeyRecord.from_api(item) for item in items]

    def create_key(
        self, name: str, value: str, description: str = "", enabled: bool = False
    ) -> KeyRecord:
        response = self.client.create_api_key(
            name=name, value=value, description=description, enabled=enabled
        )
        return KeyRecord.from_api(response)

    def attach_key_to_plan(self, plan_id: str, key_id: str) -> None:
        self.client.create_usage_plan_key(
            usagePlanId=plan_id, keyId=key_id, keyType="API_KEY"
        )

    def delete_key(self, key_id: str) -> None:
        self.client.delete_api_key(apiKey=key_id)
