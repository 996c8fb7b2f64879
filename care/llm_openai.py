from typing import List, Dict
from openai import OpenAI
import openai as openai_pkg

from care.errors import (
    ProviderError, RateLimited, AuthError, PermissionDenied,
    BadRequestError, UpstreamTimeout, Unavailable, UpstreamNetwork,
)


def map_openai_error(e: Exception) -> ProviderError:
    """Translate an openai SDK exception into the provider error hierarchy."""
    if isinstance(e, openai_pkg.RateLimitError):
        return RateLimited(str(e))
    if isinstance(e, openai_pkg.AuthenticationError):
        return AuthError(str(e))
    if isinstance(e, openai_pkg.PermissionDeniedError):
        return PermissionDenied(str(e))
    if isinstance(e, openai_pkg.BadRequestError):
        return BadRequestError(str(e))
    if isinstance(e, openai_pkg.APITimeoutError):
        return UpstreamTimeout(str(e))
    if isinstance(e, openai_pkg.APIConnectionError):
        return UpstreamNetwork(str(e))
    if isinstance(e, openai_pkg.APIStatusError):
        sc = getattr(e, "status_code", None)
        if sc == 429: return RateLimited(str(e))
        if sc == 401: return AuthError(str(e))
        if sc == 403: return PermissionDenied(str(e))
        if sc in (500, 502, 503): return Unavailable(str(e))
        if sc == 504: return UpstreamTimeout(str(e))
    return ProviderError(str(e))


class OpenAILLM:
    def __init__(self, api_key: str, model: str = "gpt-4o-mini", base_url: str | None = None):
        self.client = OpenAI(api_key=api_key, base_url=base_url) if base_url else OpenAI(api_key=api_key)
        self.model = model

    def complete(self, messages: List[Dict[str, str]], max_tokens: int = 300, temperature: float = 0.4) -> str:
        try:
            comp = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
            return (comp.choices[0].message.content or "").strip()
        except Exception as e:
            raise map_openai_error(e) from e
