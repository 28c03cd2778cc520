"""File upload API router."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile, status

from app.dependencies import get_upload_service
from app.schemas.response_schema import ApiResponse, success_response
from app.schemas.upload_schema import FileInfo
from app.services.upload_service import UploadService

router = APIRouter(prefix="/api/v1", tags=["upload"])

UploadServiceDep = Annotated[UploadService, Depends(get_upload_service)]


@router.post(
    "/upload",
    response_model=ApiResponse[FileInfo],
    status_code=status.HTTP_201_CREATED,
)
async def upload_file(
    service: UploadServiceDep,
    file: UploadFile = File(...),
) -> dict:
    """Store a file and return the descriptor to attach to a message."""
    result = await service.save(file)
    return success_response(result, status=201)
