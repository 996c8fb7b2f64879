from typing import List, Dict
import google.generativeai as genai
from google.api_core import exceptions as gax

from care.errors import (
    ProviderError, RateLimited, AuthError, PermissionDenied,
    BadRequestError, UpstreamTimeout, Unavailable,
)


def to_gemini_contents(messages: List[Dict[str, str]]):
    """Split role-tagged chat messages into a system instruction and Gemini contents."""
    system = "\n\n".join(m["content"] for m in messages if m["role"] == "system")
    contents = []
    for m in messages:
        if m["role"] == "system":
            continue
        role = "model" if m["role"] == "assistant" else "user"
        contents.append({"role": role, "parts": [m["content"]]})
    return system, contents


class GeminiLLM:
    def __init__(self, api_key: str, model: str = "gemini-1.5-flash"):
        genai.configure(api_key=api_key)
        self.model_name = model

    def complete(self, messages: List[Dict[str, str]], max_tokens: int = 300, temperature: float = 0.4) -> str:
        system, contents = to_gemini_contents(messages)
        model = genai.GenerativeModel(self.model_name, system_instruction=system or None)
        try:
            resp = model.generate_content(
                contents,
                generation_config=genai.GenerationConfig(
                    temperature=temperature,
                    max_output_tokens=max_tokens,
                ),
            )
            return (resp.text or "").strip()
        except genai.types.BlockedPromptException as e:
            raise BadRequestError(str(e))
        except gax.ResourceExhausted as e:
            raise RateLimited(str(e))
        except gax.DeadlineExceeded as e:
            raise UpstreamTimeout(str(e))
        except gax.Unauthenticated as e:
            raise AuthError(str(e))
        except gax.PermissionDenied as e:
            raise PermissionDenied(str(e))
        except gax.InvalidArgument as e:
            raise BadRequestError(str(e))
        except gax.ServiceUnavailable as e:
            raise Unavailable(str(e))
        except gax.GoogleAPICallError as e:
            raise ProviderError(str(e))
        except Exception as e:
            raise ProviderError(str(e))
