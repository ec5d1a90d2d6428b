"""create users, tools and tool_images tables"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "tools_20241012"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("verification_token", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_users_verification_token", "users", ["verification_token"])

    op.create_table(
        "tools",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("user_manual_path", sa.String(length=255), nullable=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_tools_user_id", "tools", ["user_id"])

    op.create_table(
        "tool_images",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "tool_id",
            sa.Integer(),
            sa.ForeignKey("tools.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("image_path", sa.String(length=255), nullable=False),
    )
    op.create_index("ix_tool_images_tool_id", "tool_images", ["tool_id"])


def downgrade():
    op.drop_index("ix_tool_images_tool_id", table_name="tool_images")
    op.drop_table("tool_images")

    op.drop_index("ix_tools_user_id", table_name="tools")
    op.drop_table("tools")

    op.drop_index("ix_users_verification_token", table_name="users")
    op.drop_table("users")
