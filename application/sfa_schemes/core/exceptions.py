from typing import Dict, List, Optional


class SchemeEngineError(Exception):
    """Base class for scheme engine errors."""


class ConfigurationError(SchemeEngineError):
    """A scheme definition violates a data-model invariant.

    Raised inside the engine only; the offending scheme is skipped and the
    errors are surfaced as a diagnostic on the calculation result.
    """

    def __init__(self, scheme_id: str, errors: List[Dict]):
        self.scheme_id = scheme_id
        self.errors = errors
        codes = ",".join(e.get("code", "") for e in errors)
        super().__init__(f"Scheme '{scheme_id}' misconfigured: {codes}")


class ValidationError(SchemeEngineError):
    """A caller-contract violation at the override/session API boundary."""

    status_code = 400

    def __init__(self, error_code: str, message: str, field: Optional[str] = None):
        self.error_code = error_code
        self.message = message
        self.field = field
        super().__init__(message)

    def to_dict(self) -> Dict:
        return {"error_code": self.error_code, "field": self.field, "message": self.message}


class SessionClosedError(ValidationError):
    """Mutation attempted on a session whose order was already submitted."""

    status_code = 409


class SessionNotFoundError(SchemeEngineError):
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Calculation session '{session_id}' not found")
