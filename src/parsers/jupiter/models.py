"""Pydantic models for Jupiter Price / Swap API responses."""

from pydantic import BaseModel, ConfigDict, Field


class JupiterPrice(BaseModel):
    """Price data for a single token from Jupiter (USD per whole token)."""

    id: str  # mint address
    type: str = ""
    price: float | None = None


class JupiterSwapResponse(BaseModel):
    """POST /swap response. ``swapTransaction`` is base64, unsigned."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    swap_transaction: str | None = Field(default=None, alias="swapTransaction")
    last_valid_block_height: int | None = Field(default=None, alias="lastValidBlockHeight")
    prioritization_fee_lamports: int | None = Field(
        default=None, alias="prioritizationFeeLamports"
    )
