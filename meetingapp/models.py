import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .database import Base

MEETING_STATUSES = ("active", "ended", "paused")
PARTICIPANT_STATUSES = ("present", "absent", "left")
NOTE_TYPES = ("general", "action", "objective", "decision", "idea", "issue", "follow-up")
NOTE_PRIORITIES = ("low", "medium", "high", "urgent")
NOTE_STATUSES = ("pending", "in_progress", "completed", "cancelled")
TRAINING_STATUSES = ("active", "completed", "cancelled")
TRAINING_LEVELS = ("beginner", "intermediate", "advanced")
MEMBER_TYPES = ("adherent", "actif")
EDUCATION_SPECIALTIES = (
    "licence_science_info",
    "licence_eea",
    "licence_math_applique",
    "licence_systeme_embarque",
    "licence_tic",
    "cpi",
    "ing_info",
    "ing_micro_electronique",
    "master_recherche_data_science",
    "master_recherche_gl",
    "master_pro_data_science",
    "master_pro_gl",
    "master_recherche_electronique",
    "master_pro_electronique",
    "other",
)


def generate_id():
    """Generate an opaque identifier for any stored entity"""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (the storage convention)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Account(Base):
    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=generate_id)
    email = Column(String(255), unique=True, index=True, nullable=False)  # Stored lower-case
    username = Column(String(100), unique=True, index=True, nullable=False)
    display_name = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    meetings = relationship("Meeting", back_populates="owner")
    trainings = relationship("Training", back_populates="owner")


class Meeting(Base):
    __tablename__ = "meetings"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("accounts.id"), index=True, nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    password_hash = Column(String(255), nullable=True)  # bcrypt hash gating access
    start_time = Column(DateTime, default=utcnow, nullable=False)
    end_time = Column(DateTime, nullable=True)
    status = Column(String(20), default="active", nullable=False)  # active, ended, paused
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    owner = relationship("Account", back_populates="meetings")
    participants = relationship("Participant", back_populates="meeting")
    notes = relationship("MeetingNote", back_populates="meeting")


class Participant(Base):
    __tablename__ = "participants"

    id = Column(String(36), primary_key=True, default=generate_id)
    meeting_id = Column(String(36), ForeignKey("meetings.id"), index=True, nullable=False)
    # Denormalized from the meeting so every query can be scoped by owner
    user_id = Column(String(36), ForeignKey("accounts.id"), index=True, nullable=False)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    join_time = Column(DateTime, default=utcnow, nullable=False)
    speaking_count = Column(Integer, default=0, nullable=False)
    last_spoke = Column(DateTime, nullable=True)
    status = Column(String(20), default="present", nullable=False)  # present, absent, left
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    meeting = relationship("Meeting", back_populates="participants")


class MeetingNote(Base):
    __tablename__ = "meeting_notes"

    id = Column(String(36), primary_key=True, default=generate_id)
    meeting_id = Column(String(36), ForeignKey("meetings.id"), index=True, nullable=False)
    user_id = Column(String(36), ForeignKey("accounts.id"), index=True, nullable=False)
    title = Column(String(255), nullable=True)
    note_type = Column(String(20), default="general", nullable=False)
    content = Column(Text, nullable=False)
    # Assignment is only kept for action notes
    assigned_to_name = Column(String(255), nullable=True)
    assigned_to_email = Column(String(255), nullable=True)
    due_date = Column(Date, nullable=True)
    priority = Column(String(20), default="medium", nullable=False)
    status = Column(String(20), nullable=True)  # pending, in_progress, completed, cancelled
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    meeting = relationship("Meeting", back_populates="notes")


class MomEmail(Base):
    """One delivery attempt of the minutes of a meeting to one recipient"""

    __tablename__ = "mom_emails"

    id = Column(String(36), primary_key=True, default=generate_id)
    meeting_id = Column(String(36), ForeignKey("meetings.id"), index=True, nullable=False)
    user_id = Column(String(36), ForeignKey("accounts.id"), index=True, nullable=False)
    recipient_email = Column(String(255), nullable=False)
    recipient_name = Column(String(255), nullable=True)
    email_type = Column(String(20), nullable=False)  # full_mom, action_items
    email_status = Column(String(20), default="pending", nullable=False)  # sent, failed, pending
    provider_message_id = Column(String(255), nullable=True)
    error = Column(Text, nullable=True)
    sent_at = Column(DateTime, default=utcnow, nullable=False)


class Training(Base):
    __tablename__ = "trainings"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("accounts.id"), index=True, nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    objectives = Column(Text, nullable=True)
    duration = Column(String(100), nullable=True)
    location = Column(String(255), nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    max_participants = Column(Integer, nullable=True)
    status = Column(String(20), default="active", nullable=False)  # active, completed, cancelled
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    owner = relationship("Account", back_populates="trainings")
    collaborators = relationship("TrainingCollaborator", back_populates="training")
    registrations = relationship("TrainingRegistration", back_populates="training")


class TrainingCollaborator(Base):
    __tablename__ = "training_collaborators"
    __table_args__ = (
        UniqueConstraint("training_id", "collaborator_email", name="uq_training_collaborator_email"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    training_id = Column(String(36), ForeignKey("trainings.id"), index=True, nullable=False)
    # Stored as an email and resolved to an account at read time
    collaborator_email = Column(String(255), index=True, nullable=False)
    added_by = Column(String(36), ForeignKey("accounts.id"), nullable=False)
    added_at = Column(DateTime, default=utcnow, nullable=False)

    training = relationship("Training", back_populates="collaborators")


class TrainingRegistration(Base):
    __tablename__ = "training_registrations"

    id = Column(String(36), primary_key=True, default=generate_id)
    training_id = Column(String(36), ForeignKey("trainings.id"), index=True, nullable=False)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    education_specialty = Column(String(100), nullable=False)
    education_level = Column(Integer, nullable=False)
    member_type = Column(String(20), nullable=False)  # adherent, actif
    training_level = Column(String(20), nullable=True)  # beginner, intermediate, advanced
    registration_date = Column(DateTime, default=utcnow, nullable=False)
    status = Column(String(50), default="registered", nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    training = relationship("Training", back_populates="registrations")
