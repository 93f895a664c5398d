"""incentive_ledger_initial

Revision ID: 5c1e9a7b3d20
Revises:
Create Date: 2026-10-17 09:00:00.000000
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "5c1e9a7b3d20"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "point_transactions",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("transaction_type", sa.String(16), nullable=False),
        sa.Column("reference_id", sa.BigInteger(), nullable=True),
        sa.Column(
            "metadata",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("amount > 0", name="ck_point_transactions_amount_positive"),
        sa.CheckConstraint(
            "transaction_type IN ('reward','bonus','redemption')",
            name="ck_point_transactions_type",
        ),
    )
    op.create_index("idx_point_transactions_user_created", "point_transactions", ["user_id", "created_at"])
    op.create_index("idx_point_transactions_type", "point_transactions", ["transaction_type"])
    op.create_index("idx_point_transactions_reference", "point_transactions", ["reference_id"])

    op.execute(
        """
        CREATE OR REPLACE FUNCTION fn_point_transactions_append_only()
        RETURNS trigger
        LANGUAGE plpgsql
        AS $$
        BEGIN
            RAISE EXCEPTION 'point_transactions is append-only';
        END;
        $$;
        """
    )
    op.execute(
        """
        CREATE TRIGGER trg_point_transactions_append_only
        BEFORE UPDATE OR DELETE ON point_transactions
        FOR EACH ROW
        EXECUTE FUNCTION fn_point_transactions_append_only();
        """
    )

    op.create_table(
        "point_accounts",
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("opened_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_locked_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("user_id"),
    )

    op.create_table(
        "rewards",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("category", sa.String(64), nullable=False),
        sa.Column("type", sa.String(64), nullable=False),
        sa.Column("point_cost", sa.Integer(), nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("point_cost > 0", name="ck_rewards_point_cost_positive"),
    )
    op.create_index("idx_rewards_available_cost", "rewards", ["is_available", "point_cost"])
    op.create_index("idx_rewards_category", "rewards", ["category"])

    op.create_table(
        "user_rewards",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("reward_id", sa.BigInteger(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("awarded_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("redeemed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "metadata",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "status IN ('pending','redeemed','expired','canceled')",
            name="ck_user_rewards_status",
        ),
        sa.ForeignKeyConstraint(["reward_id"], ["rewards.id"]),
    )
    op.create_index("idx_user_rewards_user_awarded", "user_rewards", ["user_id", "awarded_at"])
    op.create_index("idx_user_rewards_reward", "user_rewards", ["reward_id"])
    op.create_index("idx_user_rewards_status_expires", "user_rewards", ["status", "expires_at"])

    op.create_table(
        "challenges",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("category", sa.String(64), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "criteria",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("reward_points", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("status IN ('active','completed','canceled')", name="ck_challenges_status"),
        sa.CheckConstraint("reward_points >= 0", name="ck_challenges_reward_points_non_negative"),
        sa.CheckConstraint("start_date <= end_date", name="ck_challenges_window"),
    )
    op.create_index("idx_challenges_status_window", "challenges", ["status", "start_date", "end_date"])

    op.create_table(
        "challenge_participants",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("challenge_id", sa.BigInteger(), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column(
            "progress",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "status IN ('in_progress','completed','failed')",
            name="ck_challenge_participants_status",
        ),
        sa.ForeignKeyConstraint(["challenge_id"], ["challenges.id"]),
        sa.UniqueConstraint("challenge_id", "user_id", name="uq_challenge_participants_challenge_user"),
    )
    op.create_index("idx_challenge_participants_user", "challenge_participants", ["user_id"])
    op.create_index("idx_challenge_participants_status", "challenge_participants", ["status"])

    op.create_table(
        "activities",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("related_id", sa.BigInteger(), nullable=True),
        sa.Column(
            "metadata",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("idx_activities_user_created", "activities", ["user_id", "created_at"])
    op.create_index("idx_activities_type", "activities", ["type"])


def downgrade() -> None:
    op.drop_index("idx_activities_type", table_name="activities")
    op.drop_index("idx_activities_user_created", table_name="activities")
    op.drop_table("activities")

    op.drop_index("idx_challenge_participants_status", table_name="challenge_participants")
    op.drop_index("idx_challenge_participants_user", table_name="challenge_participants")
    op.drop_table("challenge_participants")

    op.drop_index("idx_challenges_status_window", table_name="challenges")
    op.drop_table("challenges")

    op.drop_index("idx_user_rewards_status_expires", table_name="user_rewards")
    op.drop_index("idx_user_rewards_reward", table_name="user_rewards")
    op.drop_index("idx_user_rewards_user_awarded", table_name="user_rewards")
    op.drop_table("user_rewards")

    op.drop_index("idx_rewards_category", table_name="rewards")
    op.drop_index("idx_rewards_available_cost", table_name="rewards")
    op.drop_table("rewards")

    op.drop_table("point_accounts")

    op.execute("DROP TRIGGER IF EXISTS trg_point_transactions_append_only ON point_transactions;")
    op.execute("DROP FUNCTION IF EXISTS fn_point_transactions_append_only();")
    op.drop_index("idx_point_transactions_reference", table_name="point_transactions")
    op.drop_index("idx_point_transactions_type", table_name="point_transactions")
    op.drop_index("idx_point_transactions_user_created", table_name="point_transactions")
    op.drop_table("point_transactions")
