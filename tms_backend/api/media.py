"""Media API router: uploads to object storage."""

from typing import List

from fastapi import APIRouter, Depends, File, UploadFile

from tms_backend.core.access_gate import AccessContext, access_gate
from tms_backend.core.constants import MediaType
from tms_backend.schemas.schemas import Envelope, PresignedUrlOut, PresignedUrlRequest, UploadedFileOut
from tms_backend.services.media_service import media_service

router = APIRouter(prefix="/media", tags=["media"], dependencies=[Depends(access_gate)])


@router.post("/images/upload/presigned-url", response_model=Envelope[PresignedUrlOut])
def image_presigned_url(body: PresignedUrlRequest, ctx: AccessContext = Depends(access_gate)):
    result = media_service.presigned_upload(body.filename, body.content_type, body.media_type, ctx.user_id)
    return {"message": "Presigned URL created", "data": result}


@router.post("/images/upload/{media_type}", response_model=Envelope[List[UploadedFileOut]])
async def upload_images(
    media_type: MediaType,
    files: List[UploadFile] = File(...),
    ctx: AccessContext = Depends(access_gate),
):
    result = await media_service.upload_files(files, media_type, ctx.user_id)
    return {"message": "Files uploaded", "data": result}


@router.post("/docs/upload/presigned-url", response_model=Envelope[PresignedUrlOut])
def doc_presigned_url(body: PresignedUrlRequest, ctx: AccessContext = Depends(access_gate)):
    result = media_service.presigned_upload(
        body.filename, body.content_type, body.media_type, ctx.user_id, documents=True
    )
    return {"message": "Presigned URL created", "data": result}


@router.post("/docs/upload/{media_type}", response_model=Envelope[List[UploadedFileOut]])
async def upload_docs(
    media_type: MediaType,
    files: List[UploadFile] = File(...),
    ctx: AccessContext = Depends(access_gate),
):
    result = await media_service.upload_files(files, media_type, ctx.user_id, documents=True)
    return {"message": "Files uploaded", "data": result}
