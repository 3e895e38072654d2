"""
Pydantic Schemas for Daemon Key Data
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class RevocableDaemonKey(BaseModel):
    """A daemon key joined with the server/node fields needed to revoke it"""

    id: str
    secret: str
    server_id: str
    node_id: str
    daemon_url: str
    daemon_secret: str

    model_config = ConfigDict(from_attributes=True)


class DaemonKeyAuthResponse(BaseModel):
    """Returned to a daemon asking who a presented key belongs to"""

    server: str
    user: str
    expires_at: datetime
    expired: bool
