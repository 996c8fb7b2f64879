from typing import List, Dict


class DummyLLM:
    """Offline backend: echoes a short supportive reply in the locked language."""

    def complete(self, messages: List[Dict[str, str]], max_tokens: int = 300, temperature: float = 0.4) -> str:
        swahili = any(m["role"] == "system" and "Kiswahili" in m["content"] for m in messages)
        if swahili:
            return "Asante kwa kunieleza. Nipo hapa kukusikiliza. Ungependa kuniambia zaidi kuhusu unavyojisikia?"
        return "Thank you for sharing that with me. I'm here to listen. Would you like to tell me more about how you're feeling?"
