from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List, Literal

ModelStatus = Literal["success", "recoverable_error", "fatal_error"]


@dataclass
class ModelRequest:
    prompt: str                                   # the new user message
    history: List[Dict[str, str]] = field(default_factory=list)  # [{"role", "content"}]
    system_prompt: Optional[str] = None
    task: str = "respond"
    temperature: float = 0.7
    max_tokens: int = 500
    timeout_s: Optional[int] = 30
    trace_id: Optional[str] = None


@dataclass
class ModelResponse:
    status: ModelStatus
    output: Optional[str] = None
    error_type: Optional[str] = None   # config_error | rate_limited | timeout | invalid_output | backend_unavailable
    metadata: Optional[Dict[str, Any]] = None
