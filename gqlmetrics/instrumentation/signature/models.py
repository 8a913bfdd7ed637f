"""Query signature models."""

from pydantic import BaseModel, ConfigDict, Field

# (hash of the raw query text, operation name)
SignatureCacheKey = tuple[str, str | None]


class QuerySignature(BaseModel):
    """Canonical, literal-free text of an operation and its hash."""

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., description="Canonical printed operation")
    hash: str = Field(..., description="SHA-256 hex digest of value")
