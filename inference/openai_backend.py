"""
OpenAI chat-completion backend.

Default backend for the relay. Sends the persona system prompt, the bounded
conversation window and the new user message to the Chat Completions API.
"""

import logging
from typing import Optional

import openai
from openai import OpenAI

from .base import ModelBackend, build_chat_messages
from .types import ModelRequest, ModelResponse

logger = logging.getLogger(__name__)


class OpenAIModelBackend(ModelBackend):
    """
    OpenAI backend (GPT-4 by default).

    A missing API key is not fatal at construction time: every request then
    reports error_type="config_error" so operators can tell misconfiguration
    apart from transient provider failures.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model_name: str = "gpt-4",
        client: Optional[OpenAI] = None,
    ):
        self.api_key = api_key or ""
        self.model_name = model_name

        if not self.api_key:
            logger.warning("OPENAI_API_KEY not found in environment variables")

        if client is not None:
            self.client = client
        elif self.api_key:
            self.client = OpenAI(api_key=self.api_key)
        else:
            self.client = None

    def generate(self, request: ModelRequest) -> ModelResponse:
        base_metadata = {
            "backend": "openai",
            "model": self.model_name,
            "trace_id": request.trace_id,
        }

        if self.client is None:
            return ModelResponse(
                status="fatal_error",
                error_type="config_error",
                metadata={**base_metadata, "error": "OPENAI_API_KEY is not configured"},
            )

        logger.info(f"Calling OpenAI {self.model_name}...")

        try:
            completion = self.client.chat.completions.create(
                model=self.model_name,
                messages=build_chat_messages(request),
                temperature=request.temperature,
                max_tokens=request.max_tokens,
                timeout=request.timeout_s,
            )
        except openai.AuthenticationError as e:
            logger.error(f"OpenAI API key is invalid or missing: {e}")
            return ModelResponse(
                status="fatal_error",
                error_type="config_error",
                metadata={**base_metadata, "error": str(e)},
            )
        except openai.RateLimitError as e:
            logger.warning(f"OpenAI API rate limit exceeded: {e}")
            return ModelResponse(
                status="recoverable_error",
                error_type="rate_limited",
                metadata={**base_metadata, "error": str(e)},
            )
        except openai.APITimeoutError as e:
            return ModelResponse(
                status="recoverable_error",
                error_type="timeout",
                metadata={**base_metadata, "error": str(e)},
            )
        except Exception as e:
            logger.error(f"OpenAI API error: {e}")
            return ModelResponse(
                status="fatal_error",
                error_type="backend_unavailable",
                metadata={**base_metadata, "error": str(e)},
            )

        content = completion.choices[0].message.content if completion.choices else None
        if not content or not content.strip():
            return ModelResponse(
                status="recoverable_error",
                error_type="invalid_output",
                metadata={**base_metadata, "error": "No response from OpenAI"},
            )

        total_tokens = completion.usage.total_tokens if completion.usage else "unknown"
        logger.info(f"OpenAI response generated ({total_tokens} tokens)")

        return ModelResponse(
            status="success",
            output=content.strip(),
            metadata={**base_metadata, "total_tokens": total_tokens},
        )
