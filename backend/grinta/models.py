from sqlalchemy import (
    Column,
    String,
    DateTime,
    ForeignKey,
    Integer,
    Boolean,
    Index,
    UniqueConstraint,
)
from sqlalchemy.sql import func
from . import config
from .db import Base


class Profile(Base):
    __tablename__ = "profile"
    id = Column(String, primary_key=True)
    username = Column(String, nullable=True, unique=True)
    first_name = Column(String, nullable=False, default="")
    last_name = Column(String, nullable=False, default="")
    # rating_gain mirrors rating - rating_base for base results only;
    # bonuses move rating without touching rating_gain.
    rating = Column(Integer, nullable=False, default=config.DEFAULT_RATING)
    rating_base = Column(Integer, nullable=False, default=config.DEFAULT_RATING)
    rating_gain = Column(Integer, nullable=False, default=0)
    matches_played = Column(Integer, nullable=False, default=0)
    wins = Column(Integer, nullable=False, default=0)
    losses = Column(Integer, nullable=False, default=0)
    draws = Column(Integer, nullable=False, default=0)
    mvp_count = Column(Integer, nullable=False, default=0)
    own_goals = Column(Integer, nullable=False, default=0)
    is_admin = Column(Boolean, nullable=False, default=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Match(Base):
    __tablename__ = "match"
    id = Column(String, primary_key=True)
    title = Column(String, nullable=False, default="")
    location = Column(String, nullable=True)
    played_at = Column(DateTime, nullable=True)
    status = Column(String, nullable=False, default="upcoming")
    score_home = Column(Integer, nullable=True)
    score_away = Column(Integer, nullable=True)
    duration_seconds = Column(Integer, nullable=True)
    settled_at = Column(DateTime(timezone=True), nullable=True)


class MatchPlayer(Base):
    __tablename__ = "match_player"
    id = Column(String, primary_key=True)
    match_id = Column(String, ForeignKey("match.id"), nullable=False)
    player_id = Column(String, ForeignKey("profile.id"), nullable=False)
    team = Column(String, nullable=True)  # "A" | "B" | None

    __table_args__ = (
        UniqueConstraint("match_id", "player_id", name="uq_match_player_match_player"),
    )


class MatchGoal(Base):
    __tablename__ = "match_goal"
    id = Column(String, primary_key=True)
    match_id = Column(String, ForeignKey("match.id"), nullable=False)
    scorer_id = Column(String, ForeignKey("profile.id"), nullable=True)
    assist_id = Column(String, ForeignKey("profile.id"), nullable=True)
    # Team credited with the goal; the opposing side for an own goal.
    team = Column(String, nullable=False)
    offset_seconds = Column(Integer, nullable=False)
    sequence_order = Column(Integer, nullable=False)
    is_own_goal = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("match_id", "sequence_order", name="uq_match_goal_sequence"),
    )


class MatchChallenge(Base):
    __tablename__ = "match_challenge"
    id = Column(String, primary_key=True)
    match_id = Column(String, ForeignKey("match.id"), nullable=False)
    player_id = Column(String, ForeignKey("profile.id"), nullable=False)
    challenge_type = Column(String, nullable=False)
    target_player_id = Column(String, ForeignKey("profile.id"), nullable=True)
    is_completed = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint(
            "match_id", "player_id", name="uq_match_challenge_match_player"
        ),
    )


class PlayerRating(Base):
    """Score (1-10) one player gave another after a match."""

    __tablename__ = "player_rating"
    id = Column(String, primary_key=True)
    match_id = Column(String, ForeignKey("match.id"), nullable=False)
    rated_player_id = Column(String, ForeignKey("profile.id"), nullable=False)
    rater_id = Column(String, ForeignKey("profile.id"), nullable=False)
    score = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "match_id",
            "rated_player_id",
            "rater_id",
            name="uq_player_rating_match_rated_rater",
        ),
    )


class MvpVote(Base):
    __tablename__ = "mvp_vote"
    id = Column(String, primary_key=True)
    match_id = Column(String, ForeignKey("match.id"), nullable=False)
    voted_player_id = Column(String, ForeignKey("profile.id"), nullable=False)
    voter_id = Column(String, ForeignKey("profile.id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("match_id", "voter_id", name="uq_mvp_vote_match_voter"),
    )


class RatingHistory(Base):
    """Ledger of every rating change applied to a player for a match."""

    __tablename__ = "rating_history"
    id = Column(String, primary_key=True)
    player_id = Column(String, ForeignKey("profile.id"), nullable=False)
    match_id = Column(String, ForeignKey("match.id"), nullable=True)
    rating_before = Column(Integer, nullable=False)
    rating_after = Column(Integer, nullable=False)
    delta = Column(Integer, nullable=False)
    reason = Column(String, nullable=False)
    challenge_type = Column(String, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    __table_args__ = (Index("ix_rating_history_match_id", "match_id"),)


class PlayerBadge(Base):
    __tablename__ = "player_badge"
    id = Column(String, primary_key=True)
    player_id = Column(String, ForeignKey("profile.id"), nullable=False)
    badge_type = Column(String, nullable=False)
    match_id = Column(String, ForeignKey("match.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
