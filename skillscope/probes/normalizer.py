import json
from typing import List, Optional, Sequence
from pydantic import BaseModel, Field
from skillscope.models.profile import LanguageCount, Profile, Repository


class RepoEvidence(BaseModel):
    name: str
    description: Optional[str] = None
    language: Optional[str] = None
    topics: List[str] = Field(default_factory=list)
    size: int = 0


def build_evidence(repos: Sequence[Repository], max_repos: int = 20) -> List[RepoEvidence]:
    """
    Projects the most recently updated repositories into compact prompt evidence.

    The list is already newest-first from GitHub, so a prefix is the current snapshot.
    """
    return [
        RepoEvidence(
            name=repo.name,
            description=repo.description,
            language=repo.language,
            topics=list(repo.topics),
            size=repo.size,
        )
        for repo in repos[:max_repos]
    ]


def evidence_to_json(evidence: Sequence[RepoEvidence]) -> str:
    return json.dumps([item.model_dump() for item in evidence], separators=(",", ":"), ensure_ascii=False)


def normalize_profile_context(
    profile: Profile,
    languages: Sequence[LanguageCount],
    evidence: Sequence[RepoEvidence],
    top_languages: int = 5,
) -> str:
    """
    Renders the per-request evidence as a dense Markdown context for the model.
    """
    lines = ["# Developer Evidence\n"]

    lines.append("## Identity")
    lines.append(f"Handle: {profile.login}")
    lines.append(f"Name: {profile.name}")
    lines.append(f"Bio: {profile.bio or 'Not provided'}")
    lines.append("")

    lines.append("## Top Languages (by repository count)")
    top = [entry.language for entry in languages[:top_languages]]
    lines.append(", ".join(top) if top else "None detected")
    lines.append("")

    lines.append(f"## Recent Repositories ({len(evidence)} most recently updated)")
    lines.append("```json")
    lines.append(evidence_to_json(evidence))
    lines.append("```")

    return "\n".join(lines)
