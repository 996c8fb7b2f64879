import asyncio
from typing import Callable, Tuple

from .messages import t

PHASE_SECONDS = 4
BAR_BLOCKS = 20

_PHASES = {
    "en": ("Inhale", "Hold", "Exhale", "Hold"),
    "sw": ("Vuta pumzi", "Shikilia", "Toa pumzi", "Shikilia"),
}


def phase_at(elapsed: int, lang: str = "en") -> str:
    """Box breathing: four phases of four seconds, repeating every sixteen."""
    phases = _PHASES.get(lang, _PHASES["en"])
    return phases[(elapsed % (PHASE_SECONDS * 4)) // PHASE_SECONDS]


def progress_bar(elapsed: int, total: int) -> str:
    filled = min(BAR_BLOCKS, (elapsed * BAR_BLOCKS) // total) if total else BAR_BLOCKS
    return "█" * filled + "░" * (BAR_BLOCKS - filled)


def _clock(seconds: int) -> str:
    return f"{seconds // 60}:{seconds % 60:02d}"


class BreathingTimer:
    def __init__(self, total: int = 120, interval: float = 1.0, lang: str = "en"):
        self.total = total
        self.interval = interval
        self.lang = lang

    def render(self, elapsed: int) -> str:
        remaining = max(0, self.total - elapsed)
        clock = _clock(remaining)
        title = t(self.lang, "Breathing Timer", "Kipima Muda cha Kupumua")
        phase = t(self.lang, "Phase", "Hatua")
        left = t(self.lang, "Remaining", "Muda uliobaki")
        return (f"🧘 {title} ({clock})\n{phase}: {phase_at(elapsed, self.lang)}\n"
                f"{left}: {clock}\n{progress_bar(elapsed, self.total)}")

    def completion(self) -> Tuple[str, Tuple[str, ...]]:
        content = t(
            self.lang,
            "✅ Breathing complete!\nGreat job taking a mindful break.\n\nWant to do another round or try a different tool?",
            "✅ Zoezi la kupumua limekamilika!\nHongera kwa kupumzika kwa utulivu.\n\nUngependa kurudia au kujaribu mbinu nyingine?",
        )
        suggestions = (
            t(self.lang, "Breathing exercise", "Zoezi la kupumua"),
            t(self.lang, "Stress self-check", "Tathmini ya msongo"),
            t(self.lang, "Talk to a counselor", "Ongea na mshauri"),
        )
        return content, suggestions

    async def run(self, on_tick: Callable[[str], object]) -> None:
        for elapsed in range(1, self.total + 1):
            await asyncio.sleep(self.interval)
            on_tick(self.render(elapsed))
