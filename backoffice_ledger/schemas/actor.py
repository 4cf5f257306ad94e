"""
Identity of whoever triggers a write.

Authentication lives outside the ledger. The actor is only
used to fill Transaction.created_by and the "by" fields of
shifts and partner entries.
"""

from pydantic import BaseModel


class Actor(BaseModel):
    id: str
    display_name: str
    role: str = "STAFF"


SYSTEM_ACTOR = Actor(id="system", display_name="System", role="SYSTEM")
SANDBOX_ACTOR = Actor(id="sandbox_user", display_name="Sandbox", role="ADMIN")
