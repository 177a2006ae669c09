"""Configuration model for remote configuration fetches."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_RESPONSE_SIZE_BYTES = 1024 * 1024  # 1 MB
DEFAULT_USER_AGENT = "pyboiler/0.1"


class FetchConfig(BaseModel):
    """HTTP settings used when fetching remote configuration documents.

    Attributes:
        timeout_seconds: Per-request timeout.
        max_response_size_bytes: Documents larger than this are rejected.
        user_agent: User-Agent header value.
        headers: Extra headers sent with every request.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    timeout_seconds: Annotated[float, Field(gt=0, le=600)] = DEFAULT_TIMEOUT_SECONDS
    max_response_size_bytes: Annotated[int, Field(ge=1024)] = (
        DEFAULT_MAX_RESPONSE_SIZE_BYTES
    )
    user_agent: Annotated[str, Field(min_length=1)] = DEFAULT_USER_AGENT
    headers: dict[str, str] = Field(default_factory=dict)
