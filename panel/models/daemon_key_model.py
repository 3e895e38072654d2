"""
Daemon Key Model
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from panel.db.session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DaemonKey(Base):
    __tablename__ = "daemon_keys"
    # At most one key per user per server, enforced by the database
    __table_args__ = (
        UniqueConstraint("user_id", "server_id", name="uq_daemon_keys_user_server"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(
        String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    server_id = Column(
        String, ForeignKey("servers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    secret = Column(String, unique=True, nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    user = relationship("User", back_populates="daemon_keys")
    server = relationship("Server", back_populates="daemon_keys")
