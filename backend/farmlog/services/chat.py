"""Scripted chat replies.

There is no language model behind the chat: a message that names one of
the user's crops (by name or variety) gets a summary of that crop, and a
handful of keywords get canned answers.
"""

from typing import Iterable

from farmlog.schemas.crop import STATUS_LABELS, Crop
from farmlog.utils.dates import format_date

GREETINGS = ("hello", "hi there", "good morning", "good evening", "nice to meet you")
THANKS = ("thank", "thanks", "cheers")
HELP = ("help", "how do i", "what can you do")

HELP_TEXT = (
    "Here is what I can do:\n"
    "- Mention a crop name or variety and I will show its details\n"
    "- Say hello and I will greet you back\n"
    "- Ask me about managing your crops"
)
FALLBACK_TEXT = (
    "Sorry, I can't answer that question.\n"
    "Mention a crop name or variety and I can show you its details."
)


def _mentions(text: str, term: str) -> bool:
    term = term.strip().lower()
    return bool(term) and term in text


def find_mentioned_crop(text: str, crops: Iterable[Crop]) -> Crop | None:
    """First crop whose name or variety appears in *text* (case-insensitive)."""
    lowered = text.lower()
    for crop in crops:
        if _mentions(lowered, crop.name) or _mentions(lowered, crop.variety):
            return crop
    return None


def describe_crop(crop: Crop) -> str:
    title = f"{crop.name} ({crop.variety})" if crop.variety else crop.name
    return (
        f"Here is what I know about {title}.\n"
        f"Status: {STATUS_LABELS.get(crop.status, crop.status)}\n"
        f"Location: {crop.location or '-'}\n"
        f"Planted: {format_date(crop.planting_date)}"
    )


def generate_reply(text: str, crops: Iterable[Crop]) -> tuple[str, str | None]:
    """Return ``(reply_text, related_crop_id)`` for a user message."""
    crops = list(crops)
    lowered = text.lower()

    crop = find_mentioned_crop(text, crops)
    if crop is not None:
        return describe_crop(crop), crop.id

    if any(word in lowered for word in GREETINGS):
        return "Hello! This is the FarmLog chat.\nAsk me about your crops.", None
    if any(word in lowered for word in THANKS):
        return "You're welcome! Is there anything else I can help with?", None
    if any(word in lowered for word in HELP):
        return HELP_TEXT, None
    if "crop" in lowered:
        if not crops:
            return "No crops registered yet. Add a new crop from the crop list.", None
        return (
            f"You have {len(crops)} crops registered.\n"
            "Mention a crop name or variety to see its details."
        ), None

    return FALLBACK_TEXT, None
