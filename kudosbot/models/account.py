"""
Domain models for linked account persistence.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class LinkedAccount(BaseModel):
    """Credential record stored per Strava athlete id.

    An empty record is the "unlinked" state: the athlete authorized at some
    point but no Discord user is currently attached.
    """

    model_config = ConfigDict(populate_by_name=True)

    access_token: Optional[str] = Field(None, alias="accessToken")
    refresh_token: Optional[str] = Field(None, alias="refreshToken")
    chat_user_id: Optional[str] = Field(
        None, alias="discordId", description="Linked Discord user id."
    )
    profile_image_url: Optional[str] = Field(
        None, alias="photo", description="Cached Strava avatar URL."
    )

    @property
    def is_linked(self) -> bool:
        return bool(self.chat_user_id)

    def to_storage(self) -> Dict[str, Any]:
        """Serialize using the on-disk (camelCase) keys, omitting unset fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


__all__ = ["LinkedAccount"]
