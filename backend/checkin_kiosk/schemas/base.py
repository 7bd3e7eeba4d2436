"""Base schema configuration."""

from pydantic import BaseModel, ConfigDict


class CamelModel(BaseModel):
    """Base model with ORM compatibility."""

    model_config = ConfigDict(from_attributes=True)


class WireModel(BaseModel):
    """Base model for payloads received from the check-in API.

    Unknown keys are kept so newer servers do not get their events dropped.
    """

    model_config = ConfigDict(extra="allow")
