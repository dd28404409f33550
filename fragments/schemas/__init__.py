"""Pydantic schemas for API requests and responses."""

from fragments.schemas.fragments import (
    FragmentMetadataResponse,
    FragmentResponse,
    ListFragmentsResponse
)
from fragments.schemas.common import ErrorResponse, HealthResponse, StatusResponse

__all__ = [
    "FragmentMetadataResponse",
    "FragmentResponse",
    "ListFragmentsResponse",
    "ErrorResponse",
    "HealthResponse",
    "StatusResponse"
]
