"""BOM service — loads the allocation snapshot and applies plans."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from panel_planner.allocation.allocator import (
    ComponentAllocationRequest,
    allocate_section,
)
from panel_planner.allocation.capacity import BoardCapacity, pin_exists
from panel_planner.config import get_settings
from panel_planner.errors import ConflictError, NotFoundError
from panel_planner.models.inventory import (
    Board,
    ComponentInstance,
    MosfetChannel,
    PanelSection,
    PinAssignment,
)
from panel_planner.schemas.bom import (
    BomApplyResult,
    BomCalculationResult,
    CreatedPinAssignment,
)
from panel_planner.schemas.enums import PinMode, PinType, WiringStatus

logger = logging.getLogger(__name__)


class BomService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_section(self, section_id: uuid.UUID) -> PanelSection:
        section = await self.db.get(PanelSection, section_id)
        if not section:
            raise NotFoundError(f"Panel section {section_id} not found")
        return section

    async def _load_instances(self, section_id: uuid.UUID) -> list[ComponentInstance]:
        stmt = (
            select(ComponentInstance)
            .where(ComponentInstance.panel_section_id == section_id)
            .options(
                selectinload(ComponentInstance.component_type),
                selectinload(ComponentInstance.pin_assignments),
            )
            .order_by(ComponentInstance.sort_order, ComponentInstance.name)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def _load_boards(self) -> list[Board]:
        stmt = (
            select(Board)
            .options(selectinload(Board.pin_assignments))
            .order_by(Board.name)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def count_free_mosfet_channels(self) -> int:
        stmt = (
            select(func.count(MosfetChannel.id))
            .outerjoin(PinAssignment, PinAssignment.mosfet_channel_id == MosfetChannel.id)
            .where(PinAssignment.id.is_(None))
        )
        return (await self.db.execute(stmt)).scalar() or 0

    async def calculate(self, section_id: uuid.UUID) -> BomCalculationResult:
        """Compute a pin allocation plan for a section. Read-only."""
        section = await self._get_section(section_id)
        settings = get_settings()

        instances = await self._load_instances(section_id)
        boards = [BoardCapacity.from_board(b) for b in await self._load_boards()]
        mosfet_free = await self.count_free_mosfet_channels()

        result = allocate_section(
            section_id=section.id,
            section_name=section.name,
            requests=[ComponentAllocationRequest.from_instance(i) for i in instances],
            boards=boards,
            mosfet_channels_available=mosfet_free,
            digital_board_size=settings.new_board_digital_pins,
            analog_board_size=settings.new_board_analog_pins,
        )

        logger.info(
            "BOM calculated for %s: %d components, %d new boards, "
            "%d/%d MOSFET channels",
            section.name,
            len(result.components),
            result.new_boards_needed,
            result.mosfet_channels_needed,
            result.mosfet_channels_available,
        )
        return result

    async def apply(self, plan: BomCalculationResult) -> BomApplyResult:
        """Write the plan's pin assignments in one transaction.

        Every referenced row is re-read and every target pin re-checked
        before it is written. Any failure rolls back the whole call, so
        either every pin in the plan is created or none is.
        """
        try:
            created = await self._write_plan(plan)
        except IntegrityError as exc:
            await self.db.rollback()
            logger.warning("BOM apply for %s hit a concurrent write", plan.section_id)
            raise ConflictError(
                "A planned pin was assigned by another request. "
                "Re-run calculate to get fresh allocations."
            ) from exc
        except (NotFoundError, ConflictError):
            await self.db.rollback()
            raise

        logger.info(
            "BOM applied for %s: %d pin assignments created",
            plan.section_name,
            len(created),
        )
        return BomApplyResult(
            section_id=plan.section_id,
            section_name=plan.section_name,
            total_pins_created=len(created),
            assignments=created,
        )

    async def _write_plan(self, plan: BomCalculationResult) -> list[CreatedPinAssignment]:
        await self._get_section(plan.section_id)
        created: list[CreatedPinAssignment] = []

        for component in plan.components:
            if component.pins_needed == 0 or not component.allocations:
                continue

            instance = await self.db.get(ComponentInstance, component.component_instance_id)
            if not instance:
                raise NotFoundError(
                    f'Component instance "{component.name}" '
                    f"({component.component_instance_id}) no longer exists"
                )

            pin_mode = PinMode.PWM if component.pwm_required else component.pin_mode

            for allocation in component.allocations:
                board = await self.db.get(
                    Board, allocation.board_id, populate_existing=True
                )
                if not board:
                    raise NotFoundError(
                        f'Board "{allocation.board_name}" '
                        f"({allocation.board_id}) no longer exists"
                    )

                for pin_number in allocation.pins:
                    if not pin_exists(
                        pin_number, board.digital_pin_count, board.analog_pin_count
                    ):
                        raise NotFoundError(
                            f'Pin {pin_number} does not exist on board "{board.name}". '
                            "Re-run calculate to get fresh allocations."
                        )

                    stmt = select(PinAssignment.id).where(
                        PinAssignment.board_id == allocation.board_id,
                        PinAssignment.pin_number == pin_number,
                    )
                    if (await self.db.execute(stmt)).first() is not None:
                        logger.warning(
                            "Pin %s on %s already assigned, aborting apply",
                            pin_number,
                            allocation.board_name,
                        )
                        raise ConflictError(
                            f'Pin {pin_number} on board "{allocation.board_name}" '
                            "is already assigned. Re-run calculate to get "
                            "fresh allocations."
                        )

                    self.db.add(
                        PinAssignment(
                            board_id=allocation.board_id,
                            pin_number=pin_number,
                            pin_type=(
                                PinType.ANALOG.value
                                if pin_number.startswith("A")
                                else PinType.DIGITAL.value
                            ),
                            pin_mode=pin_mode.value,
                            component_instance_id=component.component_instance_id,
                            power_rail=component.power_rail.value,
                            wiring_status=WiringStatus.PLANNED.value,
                            description=f"Auto-assigned for {component.name}",
                        )
                    )
                    created.append(
                        CreatedPinAssignment(
                            component_instance_id=component.component_instance_id,
                            component_name=component.name,
                            board_id=allocation.board_id,
                            board_name=allocation.board_name,
                            pin_number=pin_number,
                        )
                    )

        await self.db.flush()
        return created
