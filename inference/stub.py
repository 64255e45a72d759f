from .base import ModelBackend
from .types import ModelRequest, ModelResponse


class StubModelBackend(ModelBackend):
    """
    Deterministic fake model for testing and CI.

    Echoes the user message and how many history messages it was given,
    so tests can see exactly what reached the model.
    """

    def generate(self, request: ModelRequest) -> ModelResponse:
        metadata = {
            "backend": "stub",
            "trace_id": request.trace_id,
            "history_len": len(request.history),
        }

        if request.task == "fail":
            return ModelResponse(
                status="recoverable_error",
                error_type="invalid_output",
                metadata=metadata,
            )

        return ModelResponse(
            status="success",
            output=f"Stub reply to: {request.prompt}",
            metadata=metadata,
        )
