"""Application-related data models."""

from pydantic import BaseModel, ConfigDict, Field

from ..constants import venerable_app_name


class StackChangeRequest(BaseModel):
    """Parameters driving one stack change."""

    model_config = ConfigDict(frozen=True)

    application_name: str = Field(min_length=1)
    target_stack: str = Field(min_length=1)

    @property
    def venerable_name(self) -> str:
        return venerable_app_name(self.application_name)


class ApplicationIdentity(BaseModel):
    """The platform's handle for an application, resolved by name."""

    model_config = ConfigDict(frozen=True)

    name: str
    remote_id: str
