"""Public models for the REST API SDK."""

from restapi_sdk.models.result import Result

__all__ = ["Result"]
