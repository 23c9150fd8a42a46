"""Analysis endpoints."""

from typing import Any

from fastapi import APIRouter, status

from api.deps import EngineDep, IdentityDep
from api.schemas.analysis import AEOAnalysisCreate, AnalysisCreate
from api.schemas.responses import SuccessResponse

router = APIRouter(tags=["Analyses"])


@router.post(
    "/analyses",
    response_model=SuccessResponse[dict[str, Any]],
    status_code=status.HTTP_201_CREATED,
)
async def create_analysis(
    body: AnalysisCreate,
    identity: IdentityDep,
    engine: EngineDep,
) -> SuccessResponse[dict[str, Any]]:
    """
    Analyze a website for AI discoverability.

    Paid plans and privileged identities get a real, crawl-based analysis;
    everyone else gets a simulated one. A failed crawl also yields a
    simulated result, flagged with ``is_simulated``.
    """
    analysis = await engine.analyze_website(
        body.website,
        body.keywords,
        identity,
        model_key=body.model,
    )
    return SuccessResponse(
        data=analysis.to_dict(),
        meta={"is_simulated": analysis.is_simulated},
    )


@router.post(
    "/aeo-analyses",
    response_model=SuccessResponse[dict[str, Any]],
    status_code=status.HTTP_201_CREATED,
)
async def create_aeo_analysis(
    body: AEOAnalysisCreate,
    identity: IdentityDep,
    engine: EngineDep,
) -> SuccessResponse[dict[str, Any]]:
    """Check how often AI providers cite a website for the given prompts."""
    analysis = await engine.analyze_aeo(
        body.website,
        [p.to_spec() for p in body.prompts],
        identity,
        brand_name=body.brand_name,
        providers=body.providers,
    )
    return SuccessResponse(
        data=analysis.to_dict(),
        meta={"is_simulated": analysis.is_simulated},
    )


@router.get("/usage", response_model=SuccessResponse[dict[str, Any]])
async def get_usage(identity: IdentityDep, engine: EngineDep) -> SuccessResponse[dict[str, Any]]:
    """Current-period usage and limits for the caller."""
    usage = await engine.policy.get_usage(identity)
    return SuccessResponse(data=usage)
