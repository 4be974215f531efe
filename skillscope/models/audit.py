import math
from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator
from skillscope.models.profile import LanguageCount

FALLBACK_ROLE = "Software Developer"
FALLBACK_MISSING = "Unable to analyze"
FALLBACK_PERSONA = "AI analysis is currently unavailable for this profile."
FALLBACK_PITCH = "Review the repository statistics above for a snapshot of this developer's public work."


def _round_number(value):
    # non-finite or unparsable values are returned untouched so int validation rejects them
    if isinstance(value, str):
        try:
            number = float(value.strip().rstrip("%"))
        except ValueError:
            return value
        return int(round(number)) if math.isfinite(number) else value
    if isinstance(value, float) and math.isfinite(value):
        return int(round(value))
    return value


class ProjectBrief(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = Field(..., description="Short project name")
    description: str = Field(default="", description="What to build and which gap it closes")
    stack: List[str] = Field(default_factory=list, description="Technologies the project would exercise")


class AuditFields(BaseModel):
    """Field set shared by model-derived and fallback audits."""
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    detected_role: str = Field(..., min_length=1, description="Primary role inferred from the evidence")
    used_stack: List[str] = Field(default_factory=list, description="Technologies the developer demonstrably uses")
    missing_stack: List[str] = Field(default_factory=list, description="Technologies expected for the role but absent")
    persona: str = Field(..., min_length=1, description="One-sentence developer persona")
    pitch: str = Field(..., min_length=1, description="Recruiter-facing pitch")
    skill_rating: int = Field(..., description="0-100 rating")

    # Gap analysis, only when a job description was supplied
    match_percentage: Optional[int] = Field(None, description="0-100 fit against the job description")
    critical_gaps: Optional[str] = Field(None, description="Narrative of the most important gaps")
    missing_project_idea: Optional[List[ProjectBrief]] = Field(None, description="Up to two projects that would close the gaps")

    @field_validator("skill_rating", "match_percentage", mode="before")
    @classmethod
    def _numeric(cls, value):
        return _round_number(value)

    @field_validator("used_stack", "missing_stack", mode="before")
    @classmethod
    def _stack_list(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @field_validator("missing_project_idea", mode="before")
    @classmethod
    def _project_list(cls, value):
        if isinstance(value, str):
            return [{"title": value}]
        if isinstance(value, dict):
            return [value]
        return value


class ModelAudit(AuditFields):
    lineage: Literal["model"] = Field("model", exclude=True)


class FallbackAudit(AuditFields):
    lineage: Literal["fallback"] = Field("fallback", exclude=True)

    @classmethod
    def from_stats(cls, languages: List[LanguageCount], skill_score: int, top_n: int = 3) -> "FallbackAudit":
        return cls(
            detected_role=FALLBACK_ROLE,
            used_stack=[entry.language for entry in languages[:top_n]],
            missing_stack=[FALLBACK_MISSING],
            persona=FALLBACK_PERSONA,
            pitch=FALLBACK_PITCH,
            skill_rating=skill_score,
        )


AuditResult = Annotated[Union[ModelAudit, FallbackAudit], Field(discriminator="lineage")]
