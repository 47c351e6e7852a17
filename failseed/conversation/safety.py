from typing import Tuple

# Self-harm / crisis phrases. Latin-script phrases are compared case-insensitively.
DANGER_KEYWORDS: Tuple[str, ...] = (
    "自殺",
    "死にたい",
    "消えたい",
    "生きていたくない",
    "自傷",
    "リストカット",
    "薬を飲む",
    "飛び降り",
    "suicide",
    "kill myself",
    "want to die",
    "end my life",
    "self-harm",
    "hurt myself",
)


def is_dangerous(text: str) -> bool:
    """Return True if the text contains any crisis phrase."""
    if not text:
        return False
    folded = text.casefold()
    return any(keyword in folded for keyword in DANGER_KEYWORDS)
