from typing import Dict, List, Sequence, Tuple
from skillscope.config import ScoreWeights
from skillscope.models.profile import AggregateStats, LanguageCount, Repository

MAX_SKILL_SCORE = 100


def aggregate_repositories(repos: Sequence[Repository]) -> Tuple[AggregateStats, List[LanguageCount]]:
    """
    Single pass over the repository list.

    Returns the totals (skill_score left at 0) and the language distribution
    sorted by descending count. Ties keep first-seen order since dicts
    preserve insertion order and sorted() is stable.
    """
    total_stars = 0
    total_forks = 0
    substantive = 0
    language_counts: Dict[str, int] = {}

    for repo in repos:
        total_stars += repo.stars or 0
        total_forks += repo.forks or 0
        if repo.is_substantive:
            substantive += 1
        if repo.language:
            language_counts[repo.language] = language_counts.get(repo.language, 0) + 1

    stats = AggregateStats(
        total_stars=total_stars,
        total_forks=total_forks,
        substantive_repo_count=substantive,
    )
    languages = [
        LanguageCount(language=name, count=count)
        for name, count in sorted(language_counts.items(), key=lambda item: item[1], reverse=True)
    ]
    return stats, languages


def compute_skill_score(stats: AggregateStats, weights: ScoreWeights) -> int:
    raw = stats.total_stars * weights.star + stats.substantive_repo_count * weights.repo
    # Upstream counts are never negative in practice, but the score must stay in range
    return max(0, min(MAX_SKILL_SCORE, raw))


def score_repositories(repos: Sequence[Repository], weights: ScoreWeights) -> Tuple[AggregateStats, List[LanguageCount]]:
    stats, languages = aggregate_repositories(repos)
    scored = stats.model_copy(update={"skill_score": compute_skill_score(stats, weights)})
    return scored, languages
