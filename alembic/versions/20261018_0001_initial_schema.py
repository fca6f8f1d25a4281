"""Initial panel inventory schema.

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "panel_sections",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("build_status", sa.String(length=50), nullable=False, server_default="NOT_ONBOARDED"),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )

    op.create_table(
        "component_types",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("default_pin_count", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("pin_types", postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default="[]"),
        sa.Column("default_pin_mode", sa.String(length=20), nullable=False, server_default="OUTPUT"),
        sa.Column("default_power_rail", sa.String(length=20), nullable=False, server_default="NONE"),
        sa.Column("pwm_required", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("typical_current_ma", sa.Float(), nullable=False, server_default="0"),
        sa.Column("standby_current_ma", sa.Float(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "component_instances",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("component_type_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("panel_section_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("power_rail", sa.String(length=20), nullable=True),
        sa.Column("build_status", sa.String(length=50), nullable=False, server_default="PLANNED"),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["component_type_id"], ["component_types.id"]),
        sa.ForeignKeyConstraint(["panel_section_id"], ["panel_sections.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_component_instances_panel_section_id", "component_instances", ["panel_section_id"]
    )

    op.create_table(
        "boards",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("board_type", sa.String(length=255), nullable=False, server_default="Arduino Mega 2560"),
        sa.Column("digital_pin_count", sa.Integer(), nullable=False, server_default="54"),
        sa.Column("analog_pin_count", sa.Integer(), nullable=False, server_default="16"),
        sa.Column("pwm_pins", postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default="[]"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "mosfet_boards",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("channel_count", sa.Integer(), nullable=False, server_default="8"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "mosfet_channels",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("mosfet_board_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("channel_number", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["mosfet_board_id"], ["mosfet_boards.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("mosfet_board_id", "channel_number", name="uq_mosfet_channels_board_channel"),
    )

    op.create_table(
        "pin_assignments",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("board_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("pin_number", sa.String(length=10), nullable=False),
        sa.Column("pin_type", sa.String(length=20), nullable=False, server_default="DIGITAL"),
        sa.Column("pin_mode", sa.String(length=20), nullable=False, server_default="INPUT"),
        sa.Column("component_instance_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("mosfet_channel_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("power_rail", sa.String(length=20), nullable=False, server_default="NONE"),
        sa.Column("wiring_status", sa.String(length=20), nullable=False, server_default="UNASSIGNED"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["board_id"], ["boards.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["component_instance_id"], ["component_instances.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["mosfet_channel_id"], ["mosfet_channels.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("board_id", "pin_number", name="uq_pin_assignments_board_pin"),
        sa.UniqueConstraint("mosfet_channel_id"),
    )

    op.create_table(
        "psu_config",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False, server_default="Main PSU"),
        sa.Column("capacity_watts", sa.Float(), nullable=False),
        sa.Column("converter_efficiency", sa.Float(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("psu_config")
    op.drop_table("pin_assignments")
    op.drop_table("mosfet_channels")
    op.drop_table("mosfet_boards")
    op.drop_table("boards")
    op.drop_index("ix_component_instances_panel_section_id", table_name="component_instances")
    op.drop_table("component_instances")
    op.drop_table("component_types")
    op.drop_table("panel_sections")
