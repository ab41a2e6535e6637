"""Models for responses of the remote revision API."""

from pydantic import BaseModel, Field

from gitrevision.models.base import Identity


class RemoteIdentity(BaseModel):
    """Author or committer as reported by the remote API."""

    name: str = Field(..., description="Display name")
    email: str = Field(..., description="E-mail address")
    date: str = Field(..., description="Timestamp, already formatted by the server")

    def to_identity(self) -> Identity:
        return Identity(name=self.name, email=self.email, date=self.date)


class RemoteCommit(BaseModel):
    """Body of ``GET /api/commit/<hash>/``."""

    author: RemoteIdentity = Field(..., description="Commit author")
    committer: RemoteIdentity = Field(..., description="Commit committer")
    message: str = Field(..., description="The full commit message")
