"""Pydantic schemas for fragment endpoints."""

from typing import List, Union

from pydantic import BaseModel, ConfigDict, Field

from fragments.types import Fragment


class FragmentMetadataResponse(BaseModel):
    """Fragment metadata as exposed to clients."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    owner_id: str = Field(alias="ownerId")
    created: str
    updated: str
    type: str
    size: int

    @classmethod
    def from_fragment(cls, fragment: Fragment) -> "FragmentMetadataResponse":
        return cls(
            id=fragment.id,
            owner_id=fragment.owner_id,
            created=fragment.created,
            updated=fragment.updated,
            type=fragment.type,
            size=fragment.size,
        )


class FragmentResponse(BaseModel):
    """Response model for create, update and info."""
    status: str = "ok"
    fragment: FragmentMetadataResponse


class ListFragmentsResponse(BaseModel):
    """Response model for fragment listing (ids, or metadata when expanded)."""
    status: str = "ok"
    fragments: Union[List[FragmentMetadataResponse], List[str]]
