"""Solana Action endpoint — GET/OPTIONS descriptor, POST view/sweep."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel

from config.settings import Settings
from src.api.app import action_rate_limit, limiter
from src.api.dependencies import get_settings, get_sweeper
from src.sweeper.exceptions import InvalidAccount
from src.sweeper.pipeline import DustSweeper

router = APIRouter(tags=["action"])

VIEW = "view"
SWEEP = "sweep"


class ActionLink(BaseModel):
    label: str
    href: str
    type: str = "transaction"


class ActionLinks(BaseModel):
    actions: list[ActionLink]


class ActionDescriptor(BaseModel):
    icon: str
    title: str
    description: str
    label: str
    links: ActionLinks


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": {"message": message}}, status_code=status_code)


def enabled_actions(sweeper: DustSweeper) -> tuple[str, ...]:
    if sweeper.config.enable_view_action:
        return (VIEW, SWEEP)
    return (SWEEP,)


def build_descriptor(
    request: Request, sweeper: DustSweeper, settings: Settings
) -> ActionDescriptor:
    threshold = sweeper.config.threshold_label
    base_url = request.url.remove_query_params("action")
    labels = {VIEW: "View Dust Tokens", SWEEP: "Sweep Dust Tokens"}
    return ActionDescriptor(
        icon=settings.action_icon_url,
        title=settings.action_title,
        description=(
            f"Swap tokens worth {threshold} to {settings.stablecoin_symbol} using Jupiter"
        ),
        label=settings.action_label,
        links=ActionLinks(
            actions=[
                ActionLink(
                    label=labels[name],
                    href=str(base_url.include_query_params(action=name)),
                )
                for name in enabled_actions(sweeper)
            ]
        ),
    )


@router.get("/action")
async def get_action(
    request: Request,
    sweeper: DustSweeper = Depends(get_sweeper),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """Action metadata shown by the wallet before the user picks an action."""
    descriptor = build_descriptor(request, sweeper, settings)
    return JSONResponse(descriptor.model_dump())


@router.options("/action")
async def options_action(
    request: Request,
    sweeper: DustSweeper = Depends(get_sweeper),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """CORS preflight — same body and headers as GET."""
    return await get_action(request, sweeper, settings)


@router.post("/action")
@limiter.limit(action_rate_limit)
async def post_action(
    request: Request,
    sweeper: DustSweeper = Depends(get_sweeper),
) -> JSONResponse:
    """Run the scan (view) or the full sweep for ``{"account": ...}``."""
    action = request.query_params.get("action")
    if action not in enabled_actions(sweeper):
        return _error(400, "Invalid action")

    try:
        try:
            body: Any = await request.json()
        except ValueError:
            body = None
        account = body.get("account") if isinstance(body, dict) else None

        if action == VIEW:
            scan = await sweeper.scan(account)
            payload: dict[str, Any] = {
                "type": "message",
                "message": sweeper.view_message(scan),
                "dust": [
                    {"mint": t.mint, "amount": t.ui_amount, "value": round(t.value, 6)}
                    for t in scan.classification.dust
                ],
            }
        else:
            result = await sweeper.sweep(account)
            payload = {
                "type": "transaction",
                "transaction": result.plan.transaction.serialize(),
                "message": result.message,
                "legs": [leg.to_dict() for leg in result.plan.legs],
            }

    except InvalidAccount as e:
        logger.info(f"[ACTION] Rejected account: {e}")
        return _error(400, "Invalid account")
    except Exception:
        logger.exception(f"[ACTION] {action} failed")
        return _error(500, "An unexpected error occurred")

    return JSONResponse(payload)
