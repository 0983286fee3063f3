"""Chain listing contract."""

from pydantic import BaseModel, ConfigDict, Field


class ChainListResponse(BaseModel):
    """Every accepted chain name with its chain ID, plus the primary assets."""

    model_config = ConfigDict(populate_by_name=True)

    chains: dict[str, int]
    primary_assets: list[str] = Field(..., alias="primaryAssets")
