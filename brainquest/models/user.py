# brainquest/models/user.py
from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    Date,
    DateTime,
    ForeignKey,
    JSON,
    Text,
    Boolean,
)
from sqlalchemy.orm import declarative_base, relationship
from datetime import datetime


Base = declarative_base()



class User(Base):
    __tablename__ = "users"
    id = Column(String, primary_key=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    total_xp = Column(Integer, default=0, nullable=False)
    # Completed sessions across all quizzes; gates the periodic feedback prompt
    completed_sessions = Column(Integer, default=0, nullable=False)
    preferences = Column(JSON, default=lambda: {"read_aloud": False, "sound": True})

    # Relationships
    attempts = relationship("AttemptLog", back_populates="user")
    sessions = relationship("SessionLog", back_populates="user")
    streak = relationship("StreakState", back_populates="user", uselist=False)
    achievements = relationship("UserAchievement", back_populates="user")


class AttemptLog(Base):
    __tablename__ = "attempt_logs"
    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id"), index=True)
    session_id = Column(String, index=True)
    question_id = Column(String)
    subject = Column(String)
    topic = Column(String, index=True)
    difficulty = Column(Integer)

    # Answer details
    user_answer = Column(Text, nullable=True)
    is_correct = Column(Boolean)
    time_taken = Column(Float)
    xp_earned = Column(Integer, default=0)
    timestamp = Column(DateTime, default=datetime.utcnow)

    # Relationship
    user = relationship("User", back_populates="attempts")


class SessionLog(Base):
    __tablename__ = "session_logs"
    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id"), index=True)
    type = Column(String, index=True)
    subject = Column(String)
    topics = Column(JSON, default=list)
    start_time = Column(DateTime)
    end_time = Column(DateTime)
    total_questions = Column(Integer)
    correct_answers = Column(Integer)
    accuracy = Column(Float)
    xp_earned = Column(Integer)
    difficulty = Column(Integer)
    outcome = Column(String, nullable=True)

    # Relationship
    user = relationship("User", back_populates="sessions")


class StreakState(Base):
    __tablename__ = "streak_states"
    user_id = Column(String, ForeignKey("users.id"), primary_key=True)
    current_streak = Column(Integer, default=0, nullable=False)
    longest_streak = Column(Integer, default=0, nullable=False)
    last_active_date = Column(Date, nullable=True)

    # Relationship
    user = relationship("User", back_populates="streak")


class UserAchievement(Base):
    __tablename__ = "user_achievements"
    user_id = Column(String, ForeignKey("users.id"), primary_key=True)
    achievement_id = Column(String, primary_key=True)
    unlocked_at = Column(DateTime, default=datetime.utcnow)
    xp_reward = Column(Integer, default=0, nullable=False)

    # Relationship
    user = relationship("User", back_populates="achievements")
