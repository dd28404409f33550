"""Fragment API routes."""

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.concurrency import run_in_threadpool

from common.constants import API_PREFIX
from common.logging_config import get_logger
from fragments.auth import get_current_owner
from fragments.config import API_URL
from fragments.exceptions import UnsupportedMediaTypeError
from fragments.schemas.common import ErrorResponse, StatusResponse
from fragments.schemas.fragments import (
    FragmentMetadataResponse,
    FragmentResponse,
    ListFragmentsResponse
)
from fragments.services.fragment_service import FragmentService
from fragments.utils import split_extension

logger = get_logger(__name__)

router = APIRouter(
    prefix=f"{API_PREFIX}/fragments",
    tags=["Fragments"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        415: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        501: {"model": ErrorResponse},
    }
)


def _request_content_type(request: Request) -> str:
    content_type = request.headers.get("content-type")
    if not content_type:
        raise UnsupportedMediaTypeError("Content-Type header is required")
    return content_type


def _fragment_location(request: Request, fragment_id: str) -> str:
    base_url = API_URL or str(request.base_url)
    return f"{base_url.rstrip('/')}{API_PREFIX}/fragments/{fragment_id}"


@router.post("", response_model=FragmentResponse, status_code=status.HTTP_201_CREATED)
async def create_fragment(
    request: Request,
    response: Response,
    current_owner: str = Depends(get_current_owner)
):
    """
    Create a fragment from the raw request body.

    Parameters:
        - body: Raw fragment data
        - Content-Type header: Fragment type (e.g., text/markdown)
        - Authorization header: Basic credentials (required)

    Returns:
        - fragment: Metadata of the created fragment
        - Location header: URL of the new fragment

    Raises:
        - 400: Empty body
        - 401: Missing or invalid credentials
        - 415: Unsupported type, or data invalid for its type
        - 500: Storage failure
    """
    fragment_service = FragmentService()

    content_type = _request_content_type(request)
    data = await request.body()

    fragment = await run_in_threadpool(fragment_service.create_fragment, current_owner, content_type, data)

    response.headers["Location"] = _fragment_location(request, fragment.id)

    return FragmentResponse(fragment=FragmentMetadataResponse.from_fragment(fragment))


@router.get("", response_model=ListFragmentsResponse)
def list_fragments(
    expand: str = Query(None, description="Set to 1 to return full metadata"),
    current_owner: str = Depends(get_current_owner)
):
    """
    List the current user's fragments.

    Parameters:
        - expand: "1" to return metadata objects instead of ids
        - Authorization header: Basic credentials (required)

    Returns:
        - fragments: Fragment ids, or metadata when expanded
                     (only fragments owned by current user)

    Raises:
        - 401: Missing or invalid credentials
        - 500: Storage failure
    """
    fragment_service = FragmentService()

    expanded = expand == "1"
    fragments = fragment_service.list_fragments(current_owner, expand=expanded)

    if expanded:
        return ListFragmentsResponse(
            fragments=[FragmentMetadataResponse.from_fragment(fragment) for fragment in fragments]
        )
    return ListFragmentsResponse(fragments=fragments)


@router.get("/{fragment_id}/info", response_model=FragmentResponse)
def get_fragment_info(
    fragment_id: str,
    current_owner: str = Depends(get_current_owner)
):
    """
    Get a fragment's metadata.

    Raises:
        - 401: Missing or invalid credentials
        - 404: Fragment not found
    """
    fragment_service = FragmentService()

    fragment = fragment_service.get_fragment(current_owner, fragment_id)

    return FragmentResponse(fragment=FragmentMetadataResponse.from_fragment(fragment))


@router.get("/{fragment_path}")
def get_fragment(
    fragment_path: str,
    current_owner: str = Depends(get_current_owner)
):
    """
    Get a fragment's data, optionally converted by extension.

    Parameters:
        - fragment_path: Fragment id, optionally followed by an extension
                         (e.g., "<id>.html" renders Markdown as HTML)
        - Authorization header: Basic credentials (required)

    Returns:
        - Raw or converted data with the matching Content-Type

    Raises:
        - 401: Missing or invalid credentials
        - 404: Fragment not found
        - 415: Conversion not supported for the fragment's type
        - 501: Conversion allowed but not implemented
    """
    fragment_service = FragmentService()

    fragment_id, extension = split_extension(fragment_path)

    _, result = fragment_service.read_fragment(current_owner, fragment_id, extension or None)

    return Response(content=result.data, headers={"Content-Type": result.content_type})


@router.put("/{fragment_id}", response_model=FragmentResponse)
async def update_fragment(
    fragment_id: str,
    request: Request,
    response: Response,
    current_owner: str = Depends(get_current_owner)
):
    """
    Replace a fragment's data. The Content-Type must match the stored type.

    Raises:
        - 400: Empty body, or type change attempted
        - 401: Missing or invalid credentials
        - 404: Fragment not found
        - 415: Unsupported type, or data invalid for its type
        - 500: Storage failure
    """
    fragment_service = FragmentService()

    content_type = _request_content_type(request)
    data = await request.body()

    fragment = await run_in_threadpool(
        fragment_service.update_fragment, current_owner, fragment_id, content_type, data
    )

    response.headers["Location"] = _fragment_location(request, fragment.id)

    return FragmentResponse(fragment=FragmentMetadataResponse.from_fragment(fragment))


@router.delete("/{fragment_id}", response_model=StatusResponse)
def delete_fragment(
    fragment_id: str,
    current_owner: str = Depends(get_current_owner)
):
    """
    Delete a fragment's data and metadata.

    Raises:
        - 401: Missing or invalid credentials
        - 404: Fragment not found
    """
    fragment_service = FragmentService()

    fragment_service.delete_fragment(current_owner, fragment_id)

    return StatusResponse()
