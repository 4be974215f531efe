from typing import Dict, Tuple


class SkillScopeError(Exception):
    """Base error for failures that abort an analysis."""
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidInput(SkillScopeError):
    status_code = 400


class NotFound(SkillScopeError):
    status_code = 404


class UpstreamFailure(SkillScopeError):
    status_code = 500


class AuditDegraded(Exception):
    """Raised inside the audit stage when the model call or its output is unusable.

    Never leaves AuditOrchestrator.run; it is turned into the fallback audit.
    """
    def __init__(self, reason: str, detail: str = ""):
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason}: {detail}" if detail else reason)


def error_payload(exc: SkillScopeError) -> Tuple[int, Dict[str, str]]:
    """Maps a pipeline error to an HTTP-style status and a single-field body."""
    return exc.status_code, {"error": exc.message}
