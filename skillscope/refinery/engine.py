import asyncio
import enum
import logging
import re
from typing import List, Optional, Protocol, Sequence
from pydantic import ValidationError
from pydantic_ai import Agent
from skillscope.config import Settings
from skillscope.errors import AuditDegraded
from skillscope.models.audit import AuditResult, FallbackAudit, ModelAudit
from skillscope.models.profile import LanguageCount, Profile
from skillscope.probes.normalizer import RepoEvidence, normalize_profile_context
from skillscope.refinery.validator import refine_audit

logger = logging.getLogger(__name__)

# --- Prompts ---

BASE_PROMPT = """
You are the SkillScope Audit Engine, a senior technical recruiter who reads GitHub evidence.
Voice: Professional, objective, and concise.

Analyze the developer evidence you are given:
1. **Role:** Infer the single most likely professional role (e.g. "Backend Engineer").
2. **Stack:** List technologies the evidence shows they actually use, and the ones a
   developer in that role is usually expected to know but that are missing here.
3. **Persona:** One sentence describing how this developer works.
4. **Pitch:** Two or three sentences a recruiter could send to a hiring manager.
5. **Rating:** An integer skill rating from 0 to 100.

**CRITICAL INSTRUCTION:**
Respond with a single JSON object and nothing else. No Markdown, no commentary.
"""

GAP_ANALYSIS_INSTRUCTIONS = """
**Job Description Gap Analysis**
A job description is included. Compare the evidence against it, estimate how well the
developer matches it, describe the critical gaps, and suggest exactly two projects that
would close the biggest ones.
"""

RESPONSE_KEYS = [
    '"detected_role": string',
    '"used_stack": [string, ...]',
    '"missing_stack": [string, ...]',
    '"persona": string',
    '"pitch": string',
    '"skill_rating": integer 0-100',
]

GAP_ANALYSIS_KEYS = [
    '"match_percentage": integer 0-100',
    '"critical_gaps": string',
    '"missing_project_idea": [{"title": string, "description": string, "stack": [string, ...]}, ...]',
]


def build_system_prompt(with_job_description: bool) -> str:
    prompt = BASE_PROMPT
    keys = list(RESPONSE_KEYS)
    if with_job_description:
        prompt += GAP_ANALYSIS_INSTRUCTIONS
        keys += GAP_ANALYSIS_KEYS
    shape = ",\n".join(f"  {key}" for key in keys)
    return f"{prompt}\nThe object MUST have exactly these keys:\n{{\n{shape}\n}}\n"


def build_user_prompt(context_str: str, job_description: Optional[str] = None) -> str:
    prompt = f"Audit the following developer:\n\n{context_str}"
    if job_description:
        prompt += f"\n\n## Job Description\n{job_description.strip()}"
    return prompt


class TextGenerator(Protocol):
    async def generate(self, system_prompt: str, user_prompt: str) -> str:
        ...


class PydanticAIGenerator:
    """Text generation backed by a pydantic_ai Agent. One instance lives for the whole process."""

    def __init__(self, model_name: str):
        self.model_name = model_name

    async def generate(self, system_prompt: str, user_prompt: str) -> str:
        # The agent is rebuilt per call so each request gets its own system prompt
        agent = Agent(self.model_name, output_type=str, system_prompt=system_prompt)
        result = await agent.run(user_prompt)
        return result.output


_FENCED = re.compile(r"```(?:json|JSON)?\s*(.*?)\s*```", re.DOTALL)


def parse_audit_text(text: Optional[str]) -> ModelAudit:
    if not text or not text.strip():
        raise AuditDegraded("malformed", "empty response")

    body = text.strip()
    fenced = _FENCED.search(body)
    if fenced:
        body = fenced.group(1)

    try:
        return ModelAudit.model_validate_json(body)
    except ValidationError as e:
        raise AuditDegraded("malformed", f"{e.error_count()} invalid field(s)") from e


class AuditState(str, enum.Enum):
    IDLE = "idle"
    PROMPT_BUILT = "prompt_built"
    CALLING = "calling"
    PARSED = "parsed"
    FALLBACK = "fallback"
    DONE = "done"


class AuditOrchestrator:
    """
    Runs the model audit for one request.

    At most one generator call is made. Any failure of that call, or a reply
    that does not validate, yields the fallback audit instead of an error.
    """

    def __init__(self, generator: TextGenerator, settings: Settings):
        self.generator = generator
        self.settings = settings
        self.state = AuditState.IDLE
        self.history: List[AuditState] = [AuditState.IDLE]
        self.degradation: Optional[AuditDegraded] = None

    def _advance(self, state: AuditState):
        self.state = state
        self.history.append(state)

    async def run(
        self,
        profile: Profile,
        languages: Sequence[LanguageCount],
        evidence: Sequence[RepoEvidence],
        skill_score: int,
        job_description: Optional[str] = None,
    ) -> AuditResult:
        job_description = (job_description or "").strip() or None

        context_str = normalize_profile_context(
            profile, languages, evidence, top_languages=self.settings.prompt_top_languages
        )
        system_prompt = build_system_prompt(job_description is not None)
        user_prompt = build_user_prompt(context_str, job_description)
        self._advance(AuditState.PROMPT_BUILT)

        try:
            self._advance(AuditState.CALLING)
            text = await self._call(system_prompt, user_prompt)
            audit = parse_audit_text(text)
            self._advance(AuditState.PARSED)
            result = refine_audit(audit, job_description=job_description)
        except AuditDegraded as e:
            logger.warning("  [Audit] Falling back to heuristic audit for %s (%s)", profile.login, e)
            self.degradation = e
            self._advance(AuditState.FALLBACK)
            result = FallbackAudit.from_stats(
                list(languages), skill_score, top_n=self.settings.fallback_top_languages
            )

        self._advance(AuditState.DONE)
        return result

    async def _call(self, system_prompt: str, user_prompt: str) -> str:
        try:
            return await asyncio.wait_for(
                self.generator.generate(system_prompt, user_prompt),
                timeout=self.settings.model_timeout,
            )
        except asyncio.TimeoutError as e:
            raise AuditDegraded("service", f"no reply within {self.settings.model_timeout:g}s") from e
        except Exception as e:
            # provider, quota and network errors share no common base class
            raise AuditDegraded("service", f"{e.__class__.__name__}: {e}") from e
