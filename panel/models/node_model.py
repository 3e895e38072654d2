"""
Node Model
"""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from panel.db.session import Base


class Node(Base):
    __tablename__ = "nodes"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    fqdn = Column(String, nullable=False)
    scheme = Column(String(5), default="https", nullable=False)
    daemon_listen = Column(Integer, default=8080, nullable=False)
    daemon_secret = Column(String, unique=True, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    servers = relationship("Server", back_populates="node")

    @property
    def daemon_url(self) -> str:
        """Base URL of the daemon running on this node"""
        return f"{self.scheme}://{self.fqdn}:{self.daemon_listen}"
