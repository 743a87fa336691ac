"""
Course material API endpoints.

Routes:
- POST /materials/upload - Upload a PDF and start ingestion (202)
- GET /materials/{material_id} - Poll material status
- GET /materials/{material_id}/excerpt - Ordered chunk text of a READY material

Dependencies: course_ingest.application.services, course_ingest.models
System role: Course material HTTP API
"""

import logging
import os
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status

from course_ingest.api.deps import get_material_service, get_settings_dependency
from course_ingest.api.routers.router_utils.upload_utils import (
    generate_material_key,
    save_upload_to_temp,
    validate_path_segment,
    validate_pdf_upload,
)
from course_ingest.application.services import MaterialService
from course_ingest.boundary.db.models import MaterialStatus
from course_ingest.configs import Settings
from course_ingest.core.exceptions import (
    MaterialNotFoundError,
    MaterialNotReadyError,
    UploadTooLargeError,
    ValidationError,
)
from course_ingest.models.material import (
    MaterialExcerptResponse,
    MaterialFailureResponse,
    MaterialResponse,
    MaterialUploadResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/materials", tags=["materials"])


@router.post(
    "/upload",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=MaterialUploadResponse,
)
async def upload_material(
    file: UploadFile = File(...),
    organization_id: str = Form(...),
    uploaded_by_user_id: str = Form(...),
    material_service: MaterialService = Depends(get_material_service),
    settings: Settings = Depends(get_settings_dependency),
) -> MaterialUploadResponse:
    """
    Upload a PDF course material (non-blocking).

    Spools the file to a temp location, registers the material as
    PROCESSING and hands it to the background ingestion runner. The temp
    file belongs to the pipeline from then on.

    Args:
        file: Uploaded PDF (multipart form)
        organization_id: Owning organization
        uploaded_by_user_id: Uploading user
        material_service: Injected MaterialService
        settings: Application settings

    Returns:
        MaterialUploadResponse: Material id and PROCESSING status for polling

    Raises:
        HTTPException(400): Not a PDF or invalid identifiers
        HTTPException(413): File exceeds the upload size cap
        HTTPException(500): Registration failed
    """
    logger.info(
        "Material upload request received",
        extra={"organization_id": organization_id, "file_name": file.filename},
    )

    try:
        extension = validate_pdf_upload(file.filename, file.content_type)
        validate_path_segment(organization_id, "organization_id")
        if not uploaded_by_user_id:
            raise ValidationError("uploaded_by_user_id is required", field="uploaded_by_user_id")
    except ValidationError as e:
        logger.warning(
            "Upload rejected",
            extra={"organization_id": organization_id, "file_name": file.filename, "error": e.message},
        )
        raise HTTPException(status_code=400, detail=e.message)

    try:
        temp_path, size = await save_upload_to_temp(
            file,
            max_bytes=settings.ingestion.max_upload_bytes,
            upload_dir=settings.ingestion.upload_dir,
        )
    except UploadTooLargeError as e:
        raise HTTPException(status_code=413, detail=e.message)
    except OSError as e:
        logger.exception(
            "Failed to save uploaded file",
            extra={"organization_id": organization_id, "error": str(e)},
        )
        raise HTTPException(status_code=500, detail="Failed to save uploaded file")

    s3_key = generate_material_key(
        settings.s3_materials.key_prefix,
        organization_id,
        extension,
    )

    try:
        material = await material_service.submit_upload(
            organization_id=organization_id,
            uploaded_by_user_id=uploaded_by_user_id,
            file_name=file.filename,
            s3_key=s3_key,
            file_path=temp_path,
        )
    except Exception as e:
        logger.exception(
            "Failed to start file processing",
            extra={"organization_id": organization_id, "s3_key": s3_key, "error": str(e)},
        )
        if os.path.exists(temp_path):
            os.remove(temp_path)
        raise HTTPException(status_code=500, detail="Failed to start file processing")

    logger.info(
        "Material accepted for processing",
        extra={"material_id": str(material.material_id), "size": size, "s3_key": s3_key},
    )

    return MaterialUploadResponse(
        material_id=material.material_id,
        status=material.status,
        file_name=material.file_name,
        s3_key=material.s3_key,
    )


@router.get("/{material_id}", response_model=MaterialResponse)
async def get_material(
    material_id: UUID,
    material_service: MaterialService = Depends(get_material_service),
) -> MaterialResponse:
    """
    Get material status and metadata.

    Raises:
        HTTPException(404): Material not found
    """
    try:
        material = await material_service.get_material(material_id)
    except MaterialNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)

    response = MaterialResponse.model_validate(material)
    if material.status == MaterialStatus.READY:
        response.chunk_count = await material_service.get_chunk_count(material_id)
    elif material.status == MaterialStatus.ERROR:
        failures = await material_service.get_failures(material_id)
        if failures:
            response.failure = MaterialFailureResponse.model_validate(failures[0])
    return response


@router.get("/{material_id}/excerpt", response_model=MaterialExcerptResponse)
async def get_material_excerpt(
    material_id: UUID,
    limit: int = Query(default=50, ge=1, le=1000, description="Maximum number of chunks"),
    material_service: MaterialService = Depends(get_material_service),
) -> MaterialExcerptResponse:
    """
    Get the first `limit` chunks of a READY material joined with spaces.

    Raises:
        HTTPException(404): Material not found
        HTTPException(409): Material is not READY
    """
    try:
        content, chunk_count = await material_service.get_excerpt(material_id, limit=limit)
    except MaterialNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except MaterialNotReadyError as e:
        raise HTTPException(status_code=409, detail=e.message)

    return MaterialExcerptResponse(
        material_id=material_id,
        chunk_count=chunk_count,
        content=content,
    )
