"""Quality and platform compatibility report models."""

from pydantic import BaseModel, Field, model_validator

READY = "ready"


class QualityReport(BaseModel):
    """0-100 quality score and the sub-scores it was built from."""

    score: int = Field(ge=0, le=100)
    duration: int = Field(ge=0)
    framerate: int = Field(ge=0)
    format: int = Field(ge=0)
    size: int = Field(ge=0)
    platform_bonus: int = Field(ge=0)

    @model_validator(mode="after")
    def _check_total(self) -> "QualityReport":
        if self.score != min(100, self.subtotal):
            raise ValueError(f"score {self.score} does not match sub-scores ({self.subtotal})")
        return self

    @property
    def subtotal(self) -> int:
        """Uncapped sum of all sub-scores."""
        return self.duration + self.framerate + self.format + self.size + self.platform_bonus


class CompatibilityReport(BaseModel):
    """Per-platform upload compatibility."""

    instagram: bool = False
    tiktok: bool = False
    youtube: bool = False
    twitter: bool = False
    reason: str = READY

    @property
    def is_ready(self) -> bool:
        return self.reason == READY

    @property
    def platforms(self) -> dict[str, bool]:
        return {
            "instagram": self.instagram,
            "tiktok": self.tiktok,
            "youtube": self.youtube,
            "twitter": self.twitter,
        }
