"""Create asset, template and task metadata tables"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _lifecycle_columns() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("is_deleted", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "asset_metadata",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("file_size", sa.BigInteger(), nullable=False),
        sa.Column("content_type", sa.String(length=100), nullable=False),
        sa.Column("input_key", sa.String(length=500), nullable=False),
        sa.Column("output_key", sa.String(length=500), nullable=True),
        sa.Column("bucket", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=50), server_default="uploaded", nullable=False),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        *_lifecycle_columns(),
        sa.PrimaryKeyConstraint("id", name="pk_asset_metadata"),
        sa.UniqueConstraint("input_key", name="uq_asset_metadata_input_key"),
    )
    op.create_index("ix_asset_metadata_is_deleted", "asset_metadata", ["is_deleted"])

    op.create_table(
        "template_metadata",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("storage_key", sa.String(length=500), nullable=False),
        sa.Column("bucket", sa.String(length=255), nullable=False),
        *_lifecycle_columns(),
        sa.PrimaryKeyConstraint("id", name="pk_template_metadata"),
        sa.UniqueConstraint("name", name="uq_template_metadata_name"),
        sa.UniqueConstraint("storage_key", name="uq_template_metadata_storage_key"),
    )
    op.create_index("ix_template_metadata_is_deleted", "template_metadata", ["is_deleted"])

    op.create_table(
        "task_metadata",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("template_id", sa.Integer(), nullable=False),
        sa.Column("asset_id", sa.Integer(), nullable=False),
        sa.Column("metadata", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        *_lifecycle_columns(),
        sa.ForeignKeyConstraint(
            ["template_id"],
            ["template_metadata.id"],
            name="fk_task_metadata_template_id_template_metadata",
            onupdate="CASCADE",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["asset_id"],
            ["asset_metadata.id"],
            name="fk_task_metadata_asset_id_asset_metadata",
            onupdate="CASCADE",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_task_metadata"),
    )
    op.create_index("ix_task_metadata_template_id", "task_metadata", ["template_id"])
    op.create_index("ix_task_metadata_asset_id", "task_metadata", ["asset_id"])
    op.create_index("ix_task_metadata_is_deleted", "task_metadata", ["is_deleted"])
    op.create_index(
        "uq_task_metadata_asset_template_live",
        "task_metadata",
        ["asset_id", "template_id"],
        unique=True,
        postgresql_where=sa.text("is_deleted = false"),
    )


def downgrade() -> None:
    op.drop_index("uq_task_metadata_asset_template_live", table_name="task_metadata")
    op.drop_index("ix_task_metadata_is_deleted", table_name="task_metadata")
    op.drop_index("ix_task_metadata_asset_id", table_name="task_metadata")
    op.drop_index("ix_task_metadata_template_id", table_name="task_metadata")
    op.drop_table("task_metadata")
    op.drop_index("ix_template_metadata_is_deleted", table_name="template_metadata")
    op.drop_table("template_metadata")
    op.drop_index("ix_asset_metadata_is_deleted", table_name="asset_metadata")
    op.drop_table("asset_metadata")
