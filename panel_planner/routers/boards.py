from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from panel_planner.db.session import get_db
from panel_planner.services.board_service import BoardService
from panel_planner.schemas.board import BoardAvailability

router = APIRouter()


def _get_service(db: AsyncSession = Depends(get_db)) -> BoardService:
    return BoardService(db)


@router.get("/availability", response_model=list[BoardAvailability])
async def list_board_availability(
    service: BoardService = Depends(_get_service),
):
    """Used and free digital, analog and PWM pins per board."""
    return await service.list_availability()
