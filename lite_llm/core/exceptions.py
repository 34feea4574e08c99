from fastapi import Request
from fastapi.responses import JSONResponse


class LiteLLMError(Exception):
    """Base exception for lite-llm errors."""

    def __init__(
        self,
        code: str,
        message: str,
        status: int = 500,
        details: dict | None = None,
    ):
        self.code = code
        self.message = message
        self.status = status
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        result = {
            "error": {
                "code": self.code,
                "message": self.message,
                "status": self.status,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result


class NotFoundError(LiteLLMError):
    def __init__(self, message: str = "Resource not found.", details: dict | None = None):
        super().__init__(code="not_found", message=message, status=404, details=details)


class BackendUnavailableError(LiteLLMError):
    def __init__(
        self,
        message: str = "Inference backend is unavailable.",
        details: dict | None = None,
        *,
        code: str = "backend_unavailable",
        status: int = 503,
    ):
        super().__init__(
            code=code,
            message=message,
            status=status,
            details=details or {"suggestion": "Check that the Ollama server is running and reachable."},
        )


class BackendStatusError(BackendUnavailableError):
    """The backend answered, but with a non-success status."""

    def __init__(self, status_code: int, message: str | None = None, details: dict | None = None):
        self.status_code = status_code
        super().__init__(
            message=message or f"Inference backend returned status {status_code}.",
            details=details or {"upstream_status": status_code},
            code="backend_status",
            status=502,
        )


class BackendDecodeError(LiteLLMError):
    def __init__(self, message: str = "Malformed response from inference backend.", details: dict | None = None):
        super().__init__(code="backend_decode_error", message=message, status=502, details=details)


class RequirementsNotMetError(LiteLLMError):
    """Aggregated hardware requirement violations, one per line."""

    def __init__(self, violations: list[str]):
        self.violations = list(violations)
        message = "system requirements not met:\n  - " + "\n  - ".join(self.violations)
        super().__init__(
            code="requirements_not_met",
            message=message,
            status=412,
            details={"violations": self.violations},
        )


async def lite_llm_error_handler(request: Request, exc: LiteLLMError) -> JSONResponse:
    """Global exception handler for LiteLLMError and subclasses."""
    return JSONResponse(status_code=exc.status, content=exc.to_dict())
