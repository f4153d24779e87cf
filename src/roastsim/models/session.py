"""
Module: session.py
Description: Session parameters identifying a training session.

Parameters are read once from the launch URL, cached best-effort, and
stay unchanged for the duration of a run.

Key Components:
- SessionParameters: Identifiers, credential, callback URL and mode
- DEFAULT_MODE: Mode used when the launch URL carries none

Dependencies: pydantic, typing
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from roastsim.auth.credentials import mask_api_key, reveal_api_key

DEFAULT_MODE = "learning"
LAUNCH_FIELDS = ("session_id", "api_key", "callback_url")


class SessionParameters(BaseModel):
    """
    Training context extracted from the launch URL.

    Attributes:
        session_id: Session identifier (required to launch)
        learner_id: Learner identifier (optional)
        resource_id: Training resource identifier (optional)
        api_key: Credential for the callback endpoint (required to launch)
        callback_url: Result destination (required to launch, HTTPS only)
        mode: Free-form mode, "learning" by default
    """

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True
    )

    session_id: Optional[str] = Field(default=None, description="Session identifier")
    learner_id: Optional[str] = Field(default=None, description="Learner identifier")
    resource_id: Optional[str] = Field(default=None, description="Resource identifier")
    api_key: Optional[SecretStr] = Field(default=None, description="Callback API key")
    callback_url: Optional[str] = Field(default=None, description="Callback endpoint URL")
    mode: str = Field(default=DEFAULT_MODE, description="Session mode")

    @field_validator('session_id', 'learner_id', 'resource_id', 'callback_url', mode='before')
    @classmethod
    def empty_to_none(cls, v: Any) -> Any:
        """Treat empty strings as absent."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('api_key', mode='before')
    @classmethod
    def empty_key_to_none(cls, v: Any) -> Any:
        """Treat an empty API key as absent."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('mode', mode='before')
    @classmethod
    def default_mode(cls, v: Any) -> str:
        """Fall back to the learning mode when none is given."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_MODE
        return v

    def missing_launch_fields(self) -> list:
        """Names of the launch fields that are not set."""
        return [name for name in LAUNCH_FIELDS if getattr(self, name) is None]

    def require_launch_fields(self) -> None:
        """
        Check that a simulation may start with these parameters.

        Raises:
            ConfigurationError: If session_id, api_key or callback_url is missing
        """
        from roastsim.delivery.errors import ConfigurationError

        missing = self.missing_launch_fields()
        if missing:
            raise ConfigurationError(
                f"missing session parameters: {', '.join(missing)}"
            )

    @property
    def plain_api_key(self) -> Optional[str]:
        return reveal_api_key(self.api_key)

    def masked(self) -> Dict[str, Optional[str]]:
        """Display form with the API key masked."""
        data = self.model_dump(exclude={'api_key'})
        data['api_key'] = mask_api_key(self.api_key)
        return data

    def to_cache_dict(self) -> Dict[str, Optional[str]]:
        """
        Cache form, including the full API key.

        A reload restored from the cache must be able to deliver results,
        so the key is kept in cleartext here and only here.
        """
        data = self.model_dump(exclude={'api_key'})
        data['api_key'] = self.plain_api_key
        return data

    @classmethod
    def from_cache_dict(cls, data: Dict[str, Any]) -> "SessionParameters":
        return cls.model_validate(data)
