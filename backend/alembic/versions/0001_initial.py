"""settlement schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "profile",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("username", sa.String(), nullable=True),
        sa.Column("first_name", sa.String(), nullable=False, server_default=""),
        sa.Column("last_name", sa.String(), nullable=False, server_default=""),
        sa.Column("rating", sa.Integer(), nullable=False, server_default="1000"),
        sa.Column("rating_base", sa.Integer(), nullable=False, server_default="1000"),
        sa.Column("rating_gain", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("matches_played", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("wins", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("losses", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("draws", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("mvp_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("own_goals", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
    )
    op.create_table(
        "match",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False, server_default=""),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("played_at", sa.DateTime(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="upcoming"),
        sa.Column("score_home", sa.Integer(), nullable=True),
        sa.Column("score_away", sa.Integer(), nullable=True),
        sa.Column("duration_seconds", sa.Integer(), nullable=True),
        sa.Column("settled_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "match_player",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("match_id", sa.String(), sa.ForeignKey("match.id"), nullable=False),
        sa.Column("player_id", sa.String(), sa.ForeignKey("profile.id"), nullable=False),
        sa.Column("team", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("match_id", "player_id", name="uq_match_player_match_player"),
    )
    op.create_table(
        "match_goal",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("match_id", sa.String(), sa.ForeignKey("match.id"), nullable=False),
        sa.Column("scorer_id", sa.String(), sa.ForeignKey("profile.id"), nullable=True),
        sa.Column("assist_id", sa.String(), sa.ForeignKey("profile.id"), nullable=True),
        sa.Column("team", sa.String(), nullable=False),
        sa.Column("offset_seconds", sa.Integer(), nullable=False),
        sa.Column("sequence_order", sa.Integer(), nullable=False),
        sa.Column("is_own_goal", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("match_id", "sequence_order", name="uq_match_goal_sequence"),
    )
    op.create_table(
        "match_challenge",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("match_id", sa.String(), sa.ForeignKey("match.id"), nullable=False),
        sa.Column("player_id", sa.String(), sa.ForeignKey("profile.id"), nullable=False),
        sa.Column("challenge_type", sa.String(), nullable=False),
        sa.Column("target_player_id", sa.String(), sa.ForeignKey("profile.id"), nullable=True),
        sa.Column("is_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("match_id", "player_id", name="uq_match_challenge_match_player"),
    )
    op.create_table(
        "player_rating",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("match_id", sa.String(), sa.ForeignKey("match.id"), nullable=False),
        sa.Column("rated_player_id", sa.String(), sa.ForeignKey("profile.id"), nullable=False),
        sa.Column("rater_id", sa.String(), sa.ForeignKey("profile.id"), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "match_id",
            "rated_player_id",
            "rater_id",
            name="uq_player_rating_match_rated_rater",
        ),
    )
    op.create_table(
        "mvp_vote",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("match_id", sa.String(), sa.ForeignKey("match.id"), nullable=False),
        sa.Column("voted_player_id", sa.String(), sa.ForeignKey("profile.id"), nullable=False),
        sa.Column("voter_id", sa.String(), sa.ForeignKey("profile.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("match_id", "voter_id", name="uq_mvp_vote_match_voter"),
    )
    op.create_table(
        "rating_history",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("player_id", sa.String(), sa.ForeignKey("profile.id"), nullable=False),
        sa.Column("match_id", sa.String(), sa.ForeignKey("match.id"), nullable=True),
        sa.Column("rating_before", sa.Integer(), nullable=False),
        sa.Column("rating_after", sa.Integer(), nullable=False),
        sa.Column("delta", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(), nullable=False),
        sa.Column("challenge_type", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_rating_history_match_id", "rating_history", ["match_id"])
    op.create_table(
        "player_badge",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("player_id", sa.String(), sa.ForeignKey("profile.id"), nullable=False),
        sa.Column("badge_type", sa.String(), nullable=False),
        sa.Column("match_id", sa.String(), sa.ForeignKey("match.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade():
    op.drop_table("player_badge")
    op.drop_index("ix_rating_history_match_id", table_name="rating_history")
    op.drop_table("rating_history")
    op.drop_table("mvp_vote")
    op.drop_table("player_rating")
    op.drop_table("match_challenge")
    op.drop_table("match_goal")
    op.drop_table("match_player")
    op.drop_table("match")
    op.drop_table("profile")
