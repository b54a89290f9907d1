from .apigateway import ApiGatewayStore, create_client

__all__ = ["ApiGatewayStore", "create_client"]
