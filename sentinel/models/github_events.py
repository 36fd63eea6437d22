"""Pydantic models for the GitHub webhook events the pipeline acts on.

Only the fields needed to derive a security-analysis job are modelled; the
rest of the payload is kept verbatim in ``payload`` for auditing.
"""

from dataclasses import dataclass
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from .jobs import COMMIT_SHA_PATTERN


class GithubRepository(BaseModel):
    """Repository block of a GitHub webhook payload."""
    model_config = ConfigDict(extra="ignore")

    full_name: str = Field(..., min_length=1, description="owner/name")


def _repository_from_name(value: Any) -> Any:
    # some senders give the repository as a bare "owner/name" string
    if isinstance(value, str) and value:
        return {"full_name": value}
    return value


RepositoryField = Annotated[GithubRepository, BeforeValidator(_repository_from_name)]


class GithubCommit(BaseModel):
    """One entry of a push event's ``commits`` array."""
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    added: List[str] = Field(default_factory=list)
    modified: List[str] = Field(default_factory=list)
    removed: List[str] = Field(default_factory=list)

    @field_validator("added", "modified", "removed", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class GithubPullRequestHead(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sha: str = Field(..., pattern=COMMIT_SHA_PATTERN)
    ref: Optional[str] = None


class GithubPullRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    number: Optional[int] = None
    head: GithubPullRequestHead


class PushEvent(BaseModel):
    """A validated ``push`` event."""
    kind: Literal["push"] = "push"
    repository: RepositoryField
    after: str = Field(..., pattern=COMMIT_SHA_PATTERN)
    commits: List[GithubCommit]
    deleted: bool = False
    payload: Dict[str, Any] = Field(default_factory=dict, repr=False)

    @field_validator("deleted", mode="before")
    @classmethod
    def _none_as_false(cls, value: Any) -> Any:
        return False if value is None else value

    @property
    def commit_sha(self) -> str:
        return self.after

    @property
    def is_branch_deletion(self) -> bool:
        """True for the push GitHub sends when a branch or tag is deleted."""
        return self.deleted or not self.after.strip("0")

    def changed_files(self) -> List[str]:
        """Paths touched by the pushed commits, in order of first appearance."""
        seen: Dict[str, None] = {}
        for commit in self.commits:
            for path in (*commit.added, *commit.modified, *commit.removed):
                seen.setdefault(path, None)
        return list(seen)


class PullRequestEvent(BaseModel):
    """A validated ``pull_request`` event."""
    kind: Literal["pull_request"] = "pull_request"
    action: Optional[str] = None
    repository: RepositoryField
    pull_request: GithubPullRequest
    payload: Dict[str, Any] = Field(default_factory=dict, repr=False)

    @property
    def commit_sha(self) -> str:
        return self.pull_request.head.sha

    def changed_files(self) -> List[str]:
        # pull_request payloads do not list files
        return []


ValidatedEvent = Annotated[Union[PushEvent, PullRequestEvent], Field(discriminator="kind")]


@dataclass(frozen=True)
class IgnoredEvent:
    """An event type the pipeline acknowledges but does not act on."""
    event_type: Optional[str]
    message: str = "Event type ignored"


@dataclass(frozen=True)
class InvalidPayload:
    """A supported event whose payload lacks required fields."""
    event_type: Optional[str]
    message: str
