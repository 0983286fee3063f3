"""Chain listing endpoint."""

from fastapi import APIRouter

from uniagent.chains import PRIMARY_ASSETS, get_supported_chains
from uniagent.web.contracts.chains import ChainListResponse

router = APIRouter(tags=["chains"])


@router.get("/chains", response_model=ChainListResponse)
async def list_chains() -> ChainListResponse:
    """List every accepted chain name and alias with its chain ID."""
    return ChainListResponse(
        chains=get_supported_chains(),
        primary_assets=list(PRIMARY_ASSETS),
    )
