from typing import Optional, List, Dict, Any
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TargetStatus(str, Enum):
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


ALIGNMENT_MODEL = "alignment"


class ProviderModel(BaseModel):
    """Provider payloads keep unknown fields and accept camelCase names."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class TargetRequest(ProviderModel):
    """One requested operation in the POST /tasks body."""

    model: str = Field(..., description="Operation kind, e.g. alignment")
    formats: List[str] = Field(default_factory=lambda: ["json"])
    language: Optional[str] = Field(None, description="Language code")


class CreateTaskRequest(ProviderModel):
    url: str = Field(..., description="Publicly reachable media URL")
    targets: List[TargetRequest]
    callback_url: Optional[str] = Field(None, alias="callbackUrl")


class Output(ProviderModel):
    """Artifact produced by a completed target."""

    format: Optional[str] = None
    type: Optional[str] = None
    link: Optional[str] = None

    @property
    def is_json(self) -> bool:
        return self.format == "json" or "json" in (self.type or "")


class Target(ProviderModel):
    model: Optional[str] = None
    status: Optional[str] = None
    output: Optional[List[Output]] = None
    error: Optional[Any] = None
    url: Optional[str] = None

    @property
    def is_alignment(self) -> bool:
        return self.model == ALIGNMENT_MODEL

    @property
    def is_completed(self) -> bool:
        return self.status == TargetStatus.COMPLETED.value

    @property
    def is_failed(self) -> bool:
        return self.status == TargetStatus.FAILED.value

    def json_output(self) -> Optional[Output]:
        for output in self.output or []:
            if output.is_json:
                return output
        return None


class Task(ProviderModel):
    id: str
    targets: List[Target] = Field(default_factory=list)
    created_at: Optional[Any] = Field(None, alias="createdAt")

    @field_validator("targets", mode="before")
    @classmethod
    def _null_targets(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def primary_target(self) -> Optional[Target]:
        """First target; the poller only ever looks at this one."""
        return self.targets[0] if self.targets else None

    def alignment_target(self) -> Optional[Target]:
        for target in self.targets:
            if target.is_alignment:
                return target
        return None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)
