"""CSV export endpoint."""
from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import StreamingResponse
from starlette.concurrency import run_in_threadpool

from app.core.rate_limit import export_limiter
from app.schemas.simulation import ExportRequest
from app.services.simulation_service import run_single
from engine.reporting.csv_export import iter_detailed_csv, monthly_summary_csv
from engine.simulation.parameters import ConfigurationError

router = APIRouter()


@router.post(
    "/export",
    summary="Download CSV",
    description=(
        "Simulate the first requested strategy and download either the "
        "per-interval log or the monthly summary as CSV."
    ),
)
async def export_csv(body: ExportRequest, request: Request):
    export_limiter.check(request)
    strategy = body.strategies[0]
    try:
        result = await run_in_threadpool(run_single, body, strategy)
    except ConfigurationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc

    if body.kind == "monthly":
        content = iter([monthly_summary_csv(result)])
    else:
        # One CSV line per interval, written as the response is sent
        content = iter_detailed_csv(result.detailed_log or [])

    filename = f"battery_simulation_{strategy.value}_{body.kind}.csv"
    return StreamingResponse(
        content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
