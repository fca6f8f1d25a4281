"""SQLAlchemy ORM models for the panel build inventory.

Panel sections hold component instances; component instances claim pins
on microcontroller boards; pins driving 27V loads are routed through a
channel on a MOSFET driver board.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    String,
    Text,
    DateTime,
    Boolean,
    Integer,
    Float,
    ForeignKey,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from panel_planner.db.session import Base
from panel_planner.schemas.enums import BuildStatus, PinMode, PinType, PowerRail, WiringStatus

_JSON = JSON().with_variant(JSONB(), "postgresql")


class PanelSection(Base):
    __tablename__ = "panel_sections"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    build_status: Mapped[str] = mapped_column(
        String(50), nullable=False, default=BuildStatus.NOT_ONBOARDED.value
    )
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    component_instances: Mapped[list[ComponentInstance]] = relationship(
        back_populates="panel_section", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<PanelSection {self.name} ({self.id})>"


class ComponentType(Base):
    __tablename__ = "component_types"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    default_pin_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    pin_types: Mapped[list[str]] = mapped_column(_JSON, nullable=False, default=list)
    default_pin_mode: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PinMode.OUTPUT.value
    )
    default_power_rail: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PowerRail.NONE.value
    )
    pwm_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Electrical load, milliamps
    typical_current_ma: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    standby_current_ma: Mapped[float] = mapped_column(Float, nullable=False, default=0)

    instances: Mapped[list[ComponentInstance]] = relationship(
        back_populates="component_type"
    )

    def __repr__(self) -> str:
        return f"<ComponentType {self.name}>"


class ComponentInstance(Base):
    __tablename__ = "component_instances"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    component_type_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("component_types.id"), nullable=False
    )
    panel_section_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("panel_sections.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Overrides the type's default rail when set
    power_rail: Mapped[str | None] = mapped_column(String(20), nullable=True)
    build_status: Mapped[str] = mapped_column(
        String(50), nullable=False, default=BuildStatus.PLANNED.value
    )
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    component_type: Mapped[ComponentType] = relationship(back_populates="instances")
    panel_section: Mapped[PanelSection] = relationship(
        back_populates="component_instances"
    )
    pin_assignments: Mapped[list[PinAssignment]] = relationship(
        back_populates="component_instance"
    )

    @property
    def effective_power_rail(self) -> str:
        return self.power_rail or self.component_type.default_power_rail

    def __repr__(self) -> str:
        return f"<ComponentInstance {self.name} ({self.id})>"


class Board(Base):
    __tablename__ = "boards"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    board_type: Mapped[str] = mapped_column(
        String(255), nullable=False, default="Arduino Mega 2560"
    )
    digital_pin_count: Mapped[int] = mapped_column(Integer, nullable=False, default=54)
    analog_pin_count: Mapped[int] = mapped_column(Integer, nullable=False, default=16)
    pwm_pins: Mapped[list[int]] = mapped_column(_JSON, nullable=False, default=list)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    pin_assignments: Mapped[list[PinAssignment]] = relationship(
        back_populates="board", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Board {self.name} ({self.id})>"


class PinAssignment(Base):
    __tablename__ = "pin_assignments"
    __table_args__ = (
        UniqueConstraint("board_id", "pin_number", name="uq_pin_assignments_board_pin"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    board_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("boards.id", ondelete="CASCADE"), nullable=False
    )
    pin_number: Mapped[str] = mapped_column(String(10), nullable=False)
    pin_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PinType.DIGITAL.value
    )
    pin_mode: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PinMode.INPUT.value
    )
    component_instance_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("component_instances.id", ondelete="SET NULL"), nullable=True
    )
    mosfet_channel_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("mosfet_channels.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
    )
    power_rail: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PowerRail.NONE.value
    )
    wiring_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=WiringStatus.UNASSIGNED.value
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    board: Mapped[Board] = relationship(back_populates="pin_assignments")
    component_instance: Mapped[ComponentInstance | None] = relationship(
        back_populates="pin_assignments"
    )
    mosfet_channel: Mapped[MosfetChannel | None] = relationship(
        back_populates="pin_assignment"
    )

    def __repr__(self) -> str:
        return f"<PinAssignment {self.pin_number} on {self.board_id}>"


class MosfetBoard(Base):
    __tablename__ = "mosfet_boards"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    channel_count: Mapped[int] = mapped_column(Integer, nullable=False, default=8)

    channels: Mapped[list[MosfetChannel]] = relationship(
        back_populates="mosfet_board",
        cascade="all, delete-orphan",
        order_by="MosfetChannel.channel_number",
    )

    def __repr__(self) -> str:
        return f"<MosfetBoard {self.name} ({self.id})>"


class MosfetChannel(Base):
    __tablename__ = "mosfet_channels"
    __table_args__ = (
        UniqueConstraint(
            "mosfet_board_id", "channel_number", name="uq_mosfet_channels_board_channel"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    mosfet_board_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("mosfet_boards.id", ondelete="CASCADE"), nullable=False
    )
    channel_number: Mapped[int] = mapped_column(Integer, nullable=False)

    mosfet_board: Mapped[MosfetBoard] = relationship(back_populates="channels")
    pin_assignment: Mapped[PinAssignment | None] = relationship(
        back_populates="mosfet_channel", uselist=False
    )


class PsuConfig(Base):
    __tablename__ = "psu_config"

    id: Mapped[str] = mapped_column(String(50), primary_key=True, default="singleton")
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="Main PSU")
    capacity_watts: Mapped[float] = mapped_column(Float, nullable=False)
    converter_efficiency: Mapped[float] = mapped_column(Float, nullable=False)
