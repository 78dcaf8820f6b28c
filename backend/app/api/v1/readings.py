from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile, status
from starlette.concurrency import run_in_threadpool

from app.config import settings
from app.core.rate_limit import upload_limiter
from app.schemas.readings import ReadingsUploadResponse
from app.services.readings_service import ingest

router = APIRouter()


async def _read_text(upload: UploadFile) -> str:
    raw = await upload.read()
    if len(raw) > settings.max_upload_mb * 1024 * 1024:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"{upload.filename} exceeds {settings.max_upload_mb} MB",
        )
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"{upload.filename} is not UTF-8 text",
        ) from None


@router.post(
    "/hdf",
    response_model=ReadingsUploadResponse,
    summary="Upload meter data",
    description=(
        "Parse a smart-meter HDF export into half-hourly readings covering the "
        "last 12 full months. An optional PVGIS hourly CSV replaces the "
        "generation column, scaled by pvgis_scale."
    ),
)
async def upload_hdf(
    request: Request,
    hdf_file: UploadFile = File(...),
    pvgis_file: UploadFile | None = File(default=None),
    pvgis_scale: float = Form(default=1.0, gt=0),
):
    upload_limiter.check(request)
    hdf_text = await _read_text(hdf_file)
    pvgis_text = await _read_text(pvgis_file) if pvgis_file is not None else None

    try:
        return await run_in_threadpool(
            ingest, hdf_text, pvgis_text, pvgis_scale, settings.interval_hours
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
