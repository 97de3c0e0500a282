"""
botengine/db/models.py — SQLAlchemy ORM models for the bot engine.

Tables:
  - ApiUsage     → one row per authenticated request or business event (quotas, billing)
  - Lead         → local ledger of every lead submission and its spreadsheet status
  - ChatSession  → conversation history keyed by session id
"""

import enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase


# ── Base ─────────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    pass


# ── Enums ────────────────────────────────────────────────────────────────────

class StorageStatus(str, enum.Enum):
    PENDING = "pending"
    STORED = "stored"
    FAILED = "failed"


# ── Models ───────────────────────────────────────────────────────────────────

class ApiUsage(Base):
    __tablename__ = "api_usage"

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(String(100), nullable=False, index=True)
    action = Column(String(50), nullable=False)          # "request" or a business event
    endpoint = Column(String(100), nullable=False)
    method = Column(String(10), nullable=True)
    request_id = Column(String(64), nullable=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(255), nullable=True)
    details = Column(Text, nullable=True)                 # JSON dict stored as text
    created_at = Column(DateTime, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<ApiUsage id={self.id} client={self.client_id!r} action={self.action!r}>"


class Lead(Base):
    __tablename__ = "leads"

    id = Column(Integer, primary_key=True, autoincrement=True)
    lead_id = Column(String(64), nullable=False, unique=True)
    client_id = Column(String(100), nullable=False, index=True)
    session_id = Column(String(100), nullable=True)

    name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=False)
    email = Column(String(255), nullable=False)
    project_type = Column(String(50), nullable=True)
    quoted_price = Column(String(100), nullable=True)
    persona = Column(String(100), nullable=True)
    marketing_consent = Column(Boolean, default=False, nullable=False)

    storage_status = Column(Enum(StorageStatus), default=StorageStatus.PENDING, nullable=False)
    row_number = Column(Integer, nullable=True)           # spreadsheet row once stored
    error_message = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    stored_at = Column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<Lead id={self.id} lead_id={self.lead_id!r} status={self.storage_status}>"


class ChatSession(Base):
    __tablename__ = "chat_sessions"
    __table_args__ = (UniqueConstraint("client_id", "session_id", name="uq_chat_sessions_client_session"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String(100), nullable=False, index=True)
    client_id = Column(String(100), nullable=True)
    persona = Column(String(50), nullable=True)
    history = Column(Text, nullable=False, default="[]")  # JSON list of {role, content}
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<ChatSession id={self.id} client_id={self.client_id!r} session_id={self.session_id!r}>"
