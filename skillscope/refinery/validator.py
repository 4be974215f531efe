import logging
from typing import List, Optional
from skillscope.models.audit import ModelAudit

logger = logging.getLogger(__name__)

MAX_PROJECT_IDEAS = 2


def _clamp_percent(value: Optional[int]) -> Optional[int]:
    if value is None:
        return None
    return max(0, min(100, value))


def dedupe_stack(items: List[str]) -> List[str]:
    """Drops blanks and case-insensitive duplicates, keeping first spelling and order."""
    seen = set()
    result = []
    for item in items:
        cleaned = item.strip()
        key = cleaned.lower()
        if not cleaned or key in seen:
            continue
        seen.add(key)
        result.append(cleaned)
    return result


def refine_audit(audit: ModelAudit, job_description: Optional[str] = None) -> ModelAudit:
    """
    Normalizes a parsed model audit: ranges clamped, stacks de-duplicated,
    gap-analysis fields only kept when a job description was supplied.
    """
    updates = {
        "skill_rating": _clamp_percent(audit.skill_rating),
        "used_stack": dedupe_stack(audit.used_stack),
        "missing_stack": dedupe_stack(audit.missing_stack),
    }

    if job_description:
        updates["match_percentage"] = _clamp_percent(audit.match_percentage)
        if audit.missing_project_idea:
            updates["missing_project_idea"] = audit.missing_project_idea[:MAX_PROJECT_IDEAS]
    else:
        dropped = [
            name for name in ("match_percentage", "critical_gaps", "missing_project_idea")
            if getattr(audit, name) is not None
        ]
        if dropped:
            logger.info("  [Validator] Dropping unrequested gap-analysis fields: %s", dropped)
        updates.update({"match_percentage": None, "critical_gaps": None, "missing_project_idea": None})

    return audit.model_copy(update=updates)
