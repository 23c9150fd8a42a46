"""Analysis request schemas."""

from pydantic import BaseModel, Field, field_validator

from worker.observation.models import PromptSpec, ProviderName


def _normalize_website(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("website must not be empty")
    if not v.lower().startswith(("http://", "https://")):
        v = f"https://{v}"
    return v.rstrip("/")


class AnalysisCreate(BaseModel):
    """Schema for requesting a website analysis."""

    website: str = Field(..., max_length=2048)
    keywords: list[str] = Field(default_factory=list, max_length=20)
    model: str | None = Field(None, max_length=64, description="Model key; unknown keys fall back")

    @field_validator("website")
    @classmethod
    def normalize_website(cls, v: str) -> str:
        """Strip whitespace and default the scheme to https."""
        return _normalize_website(v)

    @field_validator("keywords")
    @classmethod
    def clean_keywords(cls, v: list[str]) -> list[str]:
        return [k.strip() for k in v if k and k.strip()]


class PromptCreate(BaseModel):
    """A prompt to check for citations."""

    id: str = Field(..., min_length=1, max_length=64)
    text: str = Field(..., min_length=1, max_length=500)

    def to_spec(self) -> PromptSpec:
        return PromptSpec(id=self.id, text=self.text)


class AEOAnalysisCreate(BaseModel):
    """Schema for requesting a citation (AEO) analysis."""

    website: str = Field(..., max_length=2048)
    prompts: list[PromptCreate] = Field(..., min_length=1, max_length=25)
    brand_name: str | None = Field(None, max_length=255)
    providers: list[ProviderName] | None = None

    @field_validator("website")
    @classmethod
    def normalize_website(cls, v: str) -> str:
        """Strip whitespace and default the scheme to https."""
        return _normalize_website(v)

    @field_validator("prompts")
    @classmethod
    def unique_prompt_ids(cls, v: list[PromptCreate]) -> list[PromptCreate]:
        ids = [p.id for p in v]
        if len(ids) != len(set(ids)):
            raise ValueError("prompt ids must be unique")
        return v
