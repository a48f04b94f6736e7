"""Request bodies for the cookie consent endpoints."""

from pydantic import BaseModel, Field


class SavePreferencesRequest(BaseModel):
    # Only a literal true grants a category
    preferences: dict = Field(default_factory=dict)


class UpdatePreferenceRequest(BaseModel):
    type: str
    enabled: bool
