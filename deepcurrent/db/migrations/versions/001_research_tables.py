"""Create research feedback loop tables.

Revision ID: 001
Revises:
Create Date: 2026-10-16

Tables: topics, notes, strategy_versions, episodes, strategy_evolution_logs
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create research tables."""
    op.create_table(
        "topics",
        sa.Column("id", UUID, primary_key=True),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
    )

    op.create_table(
        "notes",
        sa.Column("id", UUID, primary_key=True),
        sa.Column(
            "topic_id", UUID, sa.ForeignKey("topics.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("type", sa.String(50)),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
    )
    op.create_index("idx_notes_topic", "notes", ["topic_id"])

    op.create_table(
        "strategy_versions",
        sa.Column("id", UUID, primary_key=True),
        sa.Column(
            "topic_id", UUID, sa.ForeignKey("topics.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("version", sa.Integer, nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("rollout_percentage", sa.Integer, nullable=False, server_default="100"),
        sa.Column("parent_version", sa.Integer),
        sa.Column("config", JSONB, nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
        sa.UniqueConstraint("topic_id", "version", name="uq_strategy_topic_version"),
        sa.CheckConstraint(
            "status IN ('active', 'candidate', 'retired')", name="ck_strategy_status"
        ),
        sa.CheckConstraint(
            "rollout_percentage BETWEEN 0 AND 100", name="ck_strategy_rollout"
        ),
    )
    op.create_index("idx_strategy_topic_status", "strategy_versions", ["topic_id", "status"])
    # Single active version per topic, enforced by the database as well
    op.execute(
        "CREATE UNIQUE INDEX uq_strategy_single_active "
        "ON strategy_versions (topic_id) WHERE status = 'active'"
    )

    op.create_table(
        "episodes",
        sa.Column("id", UUID, primary_key=True),
        sa.Column(
            "topic_id", UUID, sa.ForeignKey("topics.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("query", sa.Text, nullable=False),
        sa.Column("strategy_version", sa.Integer, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("sources_returned", JSONB, nullable=False, server_default="[]"),
        sa.Column("sources_saved", JSONB, nullable=False, server_default="[]"),
        sa.Column("followup_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("tool_usage", JSONB, nullable=False, server_default="[]"),
        sa.Column("senso_search_used", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("senso_generate_used", sa.Boolean, nullable=False, server_default="false"),
        sa.Column(
            "result_note_id", UUID, sa.ForeignKey("notes.id", ondelete="SET NULL")
        ),
        sa.Column("error_message", sa.Text),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
        sa.CheckConstraint(
            "status IN ('pending', 'running', 'completed', 'failed')",
            name="ck_episode_status",
        ),
    )
    op.create_index(
        "idx_episodes_topic_version", "episodes", ["topic_id", "strategy_version"]
    )
    op.create_index("idx_episodes_created", "episodes", ["created_at"])

    op.create_table(
        "strategy_evolution_logs",
        sa.Column("id", UUID, primary_key=True),
        sa.Column(
            "topic_id", UUID, sa.ForeignKey("topics.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("from_version", sa.Integer),
        sa.Column("to_version", sa.Integer, nullable=False),
        sa.Column("reason", sa.Text),
        sa.Column("changes", JSONB),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
    )
    op.create_index(
        "idx_evolution_logs_topic_created",
        "strategy_evolution_logs",
        ["topic_id", "created_at"],
    )


def downgrade() -> None:
    """Drop research tables."""
    op.drop_table("strategy_evolution_logs")
    op.drop_table("episodes")
    op.drop_table("strategy_versions")
    op.drop_table("notes")
    op.drop_table("topics")
