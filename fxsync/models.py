from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, PrimaryKeyConstraint
from sqlalchemy.orm import declarative_base

from .utils import utcnow

Base = declarative_base()


class Fixture(Base):
    __tablename__ = "fixtures"

    fixture_id = Column(Integer, primary_key=True, autoincrement=False)
    league_id = Column(Integer, nullable=True, index=True)
    league_name = Column(String, nullable=True)
    season = Column(Integer, nullable=True)
    date = Column(DateTime, nullable=True, index=True)  # kickoff, naive UTC
    status = Column(String, nullable=True)
    venue = Column(String, nullable=True)
    home_team_id = Column(Integer, nullable=True)
    home_team_name = Column(String, nullable=True)
    away_team_id = Column(Integer, nullable=True)
    away_team_name = Column(String, nullable=True)
    home_odds = Column(Float, nullable=True)
    draw_odds = Column(Float, nullable=True)
    away_odds = Column(Float, nullable=True)
    updated_at = Column(DateTime, nullable=True)


FIXTURE_COLUMNS = tuple(c.name for c in Fixture.__table__.columns)


class LeagueCatalog(Base):
    __tablename__ = "league_catalog"

    league_id = Column(Integer, primary_key=True, autoincrement=False)
    league_name = Column(String, nullable=True)
    country = Column(String, nullable=True)
    active = Column(Boolean, nullable=False, default=True)


class Standing(Base):
    __tablename__ = "standings"
    __table_args__ = (PrimaryKeyConstraint("league_id", "season", "team_id"),)

    league_id = Column(Integer, nullable=False)
    league_name = Column(String, nullable=True)
    season = Column(Integer, nullable=False)
    team_id = Column(Integer, nullable=False)
    team_name = Column(String, nullable=True)
    rank = Column(Integer, nullable=True)
    points = Column(Integer, nullable=True)
    matches_played = Column(Integer, nullable=True)
    wins = Column(Integer, nullable=True)
    draws = Column(Integer, nullable=True)
    losses = Column(Integer, nullable=True)


class CurrentStanding(Base):
    __tablename__ = "current_standings"
    __table_args__ = (PrimaryKeyConstraint("league_id", "season", "team_id"),)

    league_id = Column(Integer, nullable=False)
    league_name = Column(String, nullable=True)
    season = Column(Integer, nullable=False)
    team_id = Column(Integer, nullable=False)
    team_name = Column(String, nullable=True)
    rank = Column(Integer, nullable=True)
    points = Column(Integer, nullable=True)
    matches_played = Column(Integer, nullable=True)
    wins = Column(Integer, nullable=True)
    draws = Column(Integer, nullable=True)
    losses = Column(Integer, nullable=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


class Result(Base):
    __tablename__ = "results"

    fixture_id = Column(Integer, primary_key=True, autoincrement=False)
    league_id = Column(Integer, nullable=True, index=True)
    league_name = Column(String, nullable=True)
    season = Column(Integer, nullable=True)
    date = Column(DateTime, nullable=True)
    home_team_id = Column(Integer, nullable=True)
    home_team_name = Column(String, nullable=True)
    away_team_id = Column(Integer, nullable=True)
    away_team_name = Column(String, nullable=True)
    home_goals = Column(Integer, nullable=True)
    away_goals = Column(Integer, nullable=True)
    status = Column(String, nullable=True)
