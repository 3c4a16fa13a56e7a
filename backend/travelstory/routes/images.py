"""
TravelStory Backend - Image Route Handlers
============================================

What:  POST /image-upload and DELETE /delete-image.
Why:   Clients upload an image first, then put the returned URL into a
       story's imageUrl.

Access:
    Both endpoints are unauthenticated and work on filenames rather than
    stories, so anyone who knows an image URL can delete the file. This is
    the established public contract; see DESIGN.md before tightening it.
"""

import logging
from typing import Optional

from fastapi import APIRouter, File, Query, UploadFile

from travelstory.dependencies import ImageServiceDep
from travelstory.schemas.common import ErrorResponse
from travelstory.schemas.story import ImageDeleteResponse, ImageUploadResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Images"])


@router.post(
    "/image-upload",
    status_code=201,
    response_model=ImageUploadResponse,
    responses={
        400: {"description": "No image uploaded", "model": ErrorResponse},
        500: {"description": "Image could not be stored", "model": ErrorResponse},
    },
    summary="Upload a story image",
)
async def upload_image(
    images: ImageServiceDep,
    image: Optional[UploadFile] = File(default=None, description="Image file (multipart field 'image')"),
) -> ImageUploadResponse:
    content: Optional[bytes] = None
    filename: Optional[str] = None
    if image is not None:
        try:
            content = await image.read()
            filename = image.filename
        finally:
            await image.close()

    image_url = await images.upload(content, filename)
    return ImageUploadResponse(image_url=image_url)


@router.delete(
    "/delete-image",
    response_model=ImageDeleteResponse,
    response_model_exclude_none=True,
    responses={400: {"description": "imageUrl parameter missing", "model": ErrorResponse}},
    summary="Delete an uploaded image by its URL",
    description="Deleting a file that is already gone is not an error.",
)
async def delete_image(
    images: ImageServiceDep,
    image_url: Optional[str] = Query(default=None, alias="imageUrl"),
) -> ImageDeleteResponse:
    if await images.delete_by_url(image_url):
        return ImageDeleteResponse(message="Image deleted successfully")
    return ImageDeleteResponse(error=True, message="Image not found")
