import logging

from fastapi import APIRouter, HTTPException, Request, status
from starlette.concurrency import run_in_threadpool

from app.core.rate_limit import simulation_limiter, sweep_limiter
from app.schemas.simulation import (
    ComparisonResponse,
    SimulationRequest,
    SweepRequest,
    SweepResponse,
)
from app.services.simulation_service import run_comparison, run_sweep
from engine.simulation.parameters import ConfigurationError

logger = logging.getLogger(__name__)

router = APIRouter()


def _unprocessable(exc: ConfigurationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))


@router.post(
    "",
    response_model=ComparisonResponse,
    summary="Run simulation",
    description=(
        "Simulate each requested battery strategy over the readings and return "
        "annual savings, payback, self-sufficiency and monthly breakdowns, "
        "alongside the no-battery baseline."
    ),
)
async def simulate(body: SimulationRequest, request: Request):
    simulation_limiter.check(request)
    try:
        return await run_in_threadpool(run_comparison, body)
    except ConfigurationError as exc:
        logger.info("Rejected simulation request: %s", exc)
        raise _unprocessable(exc) from exc


@router.post(
    "/sweep",
    response_model=SweepResponse,
    summary="Battery size sweep",
    description=(
        "Re-run the simulation for a ladder of battery sizes and return the "
        "savings-vs-size curve and the best size for each strategy."
    ),
)
async def sweep(body: SweepRequest, request: Request):
    sweep_limiter.check(request)
    try:
        return await run_in_threadpool(run_sweep, body)
    except ConfigurationError as exc:
        logger.info("Rejected sweep request: %s", exc)
        raise _unprocessable(exc) from exc
