import logging
from typing import Optional
import httpx
from skillscope.config import Settings
from skillscope.probes.github import GithubProbe, clean_handle
from skillscope.probes.normalizer import build_evidence
from skillscope.refinery.engine import AuditOrchestrator, PydanticAIGenerator, TextGenerator
from skillscope.refinery.stats import score_repositories
from skillscope.renderer.manifest import AnalysisReport, create_manifest

logger = logging.getLogger(__name__)


async def analyze(
    username: str,
    job_description: Optional[str] = None,
    *,
    settings: Optional[Settings] = None,
    generator: Optional[TextGenerator] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AnalysisReport:
    """
    Profile fetch -> stats -> score -> evidence -> audit -> report.

    Raises InvalidInput, NotFound or UpstreamFailure. A failed audit never
    raises; the report then carries the fallback audit.
    """
    handle = clean_handle(username)
    settings = settings or Settings.from_env()
    generator = generator or PydanticAIGenerator(settings.model_name)

    profile, repos = await GithubProbe(settings, transport=transport).fetch(handle)

    stats, languages = score_repositories(repos, settings.score_weights)
    logger.info(
        "  > %s: %d stars, %d forks, %d substantive repos, skill score %d",
        profile.login, stats.total_stars, stats.total_forks,
        stats.substantive_repo_count, stats.skill_score,
    )

    evidence = build_evidence(repos, max_repos=settings.evidence_max_repos)

    orchestrator = AuditOrchestrator(generator, settings)
    audit = await orchestrator.run(
        profile, languages, evidence, stats.skill_score, job_description=job_description
    )

    return create_manifest(profile, stats, languages, audit)
