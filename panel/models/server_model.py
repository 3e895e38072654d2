"""
Server Model
"""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from panel.db.session import Base


class Server(Base):
    __tablename__ = "servers"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    owner_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    node_id = Column(String, ForeignKey("nodes.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    owner = relationship("User", back_populates="servers")
    node = relationship("Node", back_populates="servers")
    subusers = relationship(
        "Subuser", back_populates="server", cascade="all, delete"
    )
    daemon_keys = relationship(
        "DaemonKey", back_populates="server", cascade="all, delete"
    )
