from config import settings

from care.llm_openai import OpenAILLM


class DeepSeekLLM(OpenAILLM):
    """DeepSeek speaks the OpenAI chat-completions protocol on its own base URL."""

    def __init__(self, api_key: str, model: str = "deepseek-chat", base_url: str | None = None):
        super().__init__(api_key=api_key, model=model, base_url=base_url or settings.DEEPSEEK_BASE_URL)
