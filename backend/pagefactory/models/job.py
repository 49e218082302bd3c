import enum
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from pagefactory.models.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobStatus(str, enum.Enum):
    PENDING = "pending"
    GENERATING_CODE = "generating_code"
    CODE_GENERATED = "code_generated"
    CREATING_REPO = "creating_repo"
    PUSHING_CODE = "pushing_code"
    DEPLOYING = "deploying"
    DEPLOYED = "deployed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.DEPLOYED, JobStatus.FAILED)


class Job(Base):
    __tablename__ = "jobs"

    id: Mapped[str] = mapped_column(String, primary_key=True) # UUID
    prompt: Mapped[str] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String, default=JobStatus.PENDING.value)
    repo_slug: Mapped[str] = mapped_column(String, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    # Stage outputs
    generated_artifact: Mapped[Optional[str]] = mapped_column(Text)
    result_url: Mapped[Optional[str]] = mapped_column(String)
    failure_message: Mapped[Optional[str]] = mapped_column(Text)

    # Hosting platform identifiers, kept for polling and diagnostics
    hosting_project_id: Mapped[Optional[str]] = mapped_column(String)
    hosting_deployment_id: Mapped[Optional[str]] = mapped_column(String)
