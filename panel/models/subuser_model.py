"""
Subuser Model
"""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from panel.db.session import Base


class Subuser(Base):
    __tablename__ = "subusers"
    __table_args__ = (
        UniqueConstraint("user_id", "server_id", name="uq_subusers_user_server"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(
        String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    server_id = Column(
        String, ForeignKey("servers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="subusers")
    server = relationship("Server", back_populates="subusers")
