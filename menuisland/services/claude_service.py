"""
Claude API service wrapper
"""
from anthropic import AsyncAnthropic
from menuisland.config import get_settings
from typing import Optional

settings = get_settings()


class ClaudeService:
    def __init__(self, api_key: Optional[str] = None, timeout: Optional[float] = None):
        api_key = api_key or settings.ANTHROPIC_API_KEY or None
        self.model = settings.CLAUDE_MODEL
        self.max_tokens = settings.CLAUDE_MAX_TOKENS
        self._available = bool(api_key)
        if self._available:
            self.client = AsyncAnthropic(
                api_key=api_key,
                timeout=timeout or settings.TRANSLATION_TIMEOUT_SECONDS,
                max_retries=0,
            )
        else:
            self.client = None

    @property
    def is_available(self) -> bool:
        return self._available

    async def generate_response(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.0,
        max_tokens: Optional[int] = None
    ) -> str:
        """
        Generate a response from Claude
        """
        if not self._available or self.client is None:
            raise RuntimeError("AI service not configured: ANTHROPIC_API_KEY is not set")

        messages = [{"role": "user", "content": prompt}]

        response = await self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens or self.max_tokens,
            temperature=temperature,
            system=system_prompt if system_prompt else "",
            messages=messages
        )

        return response.content[0].text
