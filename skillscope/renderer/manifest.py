from typing import Any, Dict, List, Optional
from pydantic import BaseModel
from skillscope.models.audit import AuditResult
from skillscope.models.profile import AggregateStats, LanguageCount, Profile


class ProfileSummary(BaseModel):
    username: str
    name: str
    avatar: Optional[str] = None
    bio: Optional[str] = None
    followers: int = 0
    public_repos: int = 0


class AnalysisReport(BaseModel):
    """The single record handed to clients."""
    profile: ProfileSummary
    stats: AggregateStats
    languages: List[LanguageCount]
    audit: AuditResult

    def to_payload(self) -> Dict[str, Any]:
        # substantive_repo_count stays internal; optional audit keys are omitted when unset
        return {
            "profile": self.profile.model_dump(),
            "stats": self.stats.model_dump(include={"total_stars", "total_forks", "skill_score"}),
            "languages": [entry.model_dump() for entry in self.languages],
            "aiAnalysis": self.audit.model_dump(exclude_none=True),
        }


def create_manifest(
    profile: Profile,
    stats: AggregateStats,
    languages: List[LanguageCount],
    audit: AuditResult,
) -> AnalysisReport:
    """
    Merges the fetched profile, aggregate stats, language distribution and audit.
    """
    return AnalysisReport(
        profile=ProfileSummary(
            username=profile.login,
            name=profile.name or profile.login,
            avatar=profile.avatar_url,
            bio=profile.bio,
            followers=profile.followers,
            public_repos=profile.public_repos,
        ),
        stats=stats,
        languages=list(languages),
        audit=audit,
    )
