"""Board service — pin availability summary across all boards."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from panel_planner.allocation.capacity import BoardCapacity
from panel_planner.models.inventory import Board
from panel_planner.schemas.board import BoardAvailability, PinAvailability


class BoardService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_availability(self) -> list[BoardAvailability]:
        stmt = (
            select(Board)
            .options(selectinload(Board.pin_assignments))
            .order_by(Board.name)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)

        items = []
        for board in result.scalars().all():
            capacity = BoardCapacity.from_board(board)
            items.append(
                BoardAvailability(
                    id=board.id,
                    name=board.name,
                    board_type=board.board_type,
                    digital_pin_count=board.digital_pin_count,
                    analog_pin_count=board.analog_pin_count,
                    pwm_pins=list(board.pwm_pins or []),
                    pin_availability=PinAvailability(**capacity.availability()),
                )
            )
        return items
