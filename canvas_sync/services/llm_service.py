"""
LLM Service for Canvas Sync
===========================

Gemini text generation on Vertex AI, used by the assistant-backed merge.
"""

import logging
from typing import Optional, Dict, Any
from pydantic import BaseModel

logger = logging.getLogger(__name__)

# Try to import Vertex AI
try:
    import vertexai
    from vertexai.generative_models import GenerativeModel, GenerationConfig
    VERTEXAI_AVAILABLE = True
except ImportError:
    VERTEXAI_AVAILABLE = False
    logger.warning("vertexai not available, assistant merge via Vertex will be disabled")


class LLMConfig(BaseModel):
    """Configuration for LLM service."""
    project_id: str = "canvas-sync"
    location: str = "us-central1"
    text_model: str = "gemini-2.0-flash-001"
    temperature: float = 0.2
    max_output_tokens: int = 8192


class LLMResponse(BaseModel):
    """Response from LLM."""
    success: bool
    content: str = ""
    error: Optional[str] = None
    usage: Optional[Dict[str, Any]] = None


class LLMService:
    """Service for Gemini text generation."""

    def __init__(self, config: Optional[LLMConfig] = None):
        self.config = config or LLMConfig()
        self._initialized = False
        self._text_model = None

    @property
    def available(self) -> bool:
        return VERTEXAI_AVAILABLE

    def _initialize(self) -> bool:
        """Initialize Vertex AI and the text model."""
        if self._initialized:
            return True

        if not VERTEXAI_AVAILABLE:
            logger.error("[LLM-SERVICE] vertexai not installed")
            return False

        try:
            vertexai.init(
                project=self.config.project_id,
                location=self.config.location
            )
            self._text_model = GenerativeModel(self.config.text_model)

            self._initialized = True
            logger.info(f"[LLM-SERVICE] Initialized with project={self.config.project_id}")
            return True

        except Exception as e:
            logger.error(f"[LLM-SERVICE] Initialization failed: {e}")
            return False

    async def generate_text(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        temperature: Optional[float] = None
    ) -> LLMResponse:
        """
        Generate text response from Gemini.

        Args:
            prompt: User prompt
            system_instruction: Optional system context
            temperature: Override default temperature

        Returns:
            LLMResponse with generated content
        """
        if not self._initialize():
            return LLMResponse(
                success=False,
                error="LLM service not initialized"
            )

        try:
            gen_config = GenerationConfig(
                temperature=temperature if temperature is not None else self.config.temperature,
                max_output_tokens=self.config.max_output_tokens,
            )

            full_prompt = prompt
            if system_instruction:
                full_prompt = f"{system_instruction}\n\n{prompt}"

            response = await self._text_model.generate_content_async(
                full_prompt,
                generation_config=gen_config
            )

            content = response.text if response.text else ""
            usage = None
            metadata = getattr(response, "usage_metadata", None)
            if metadata is not None:
                usage = {
                    "prompt_tokens": getattr(metadata, "prompt_token_count", None),
                    "output_tokens": getattr(metadata, "candidates_token_count", None),
                }

            logger.info(f"[LLM-SERVICE] Generated text, length={len(content)}")

            return LLMResponse(
                success=True,
                content=content,
                usage=usage
            )

        except Exception as e:
            logger.error(f"[LLM-SERVICE] Text generation failed: {e}")
            return LLMResponse(
                success=False,
                error=str(e)
            )
