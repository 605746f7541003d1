"""
Classification of provider failures into user-facing messages.

Imagen reports blocked prompts only through free-form error text, so the
phrase list below is best-effort and may need updating when the wording
changes upstream.
"""

from typing import Any, Callable, Optional, Tuple


SAFETY_BLOCK_PHRASES: Tuple[str, ...] = (
    "sensitive words",
    "Responsible AI practices",
)

SafetyClassifier = Callable[[str], bool]

# Finish reasons reported by Gemini when no text was produced
SAFETY_FINISH_MESSAGE = (
    "The script or style contains content that violates safety policies. "
    "Please revise your input and try again."
)
RECITATION_FINISH_MESSAGE = (
    "The response was blocked due to potential recitation issues. "
    "Try rephrasing your script."
)
EMPTY_RESPONSE_MESSAGE = (
    "The AI returned an empty response. This can happen if the script is too "
    "short, vague, or contains content that goes against the safety policy."
)


def is_safety_block(message: str, phrases: Tuple[str, ...] = SAFETY_BLOCK_PHRASES) -> bool:
    """True when an image provider error reads like a content-policy block."""
    return any(phrase in message for phrase in phrases)


def finish_reason_name(reason: Any) -> Optional[str]:
    """Normalize an SDK finish reason (enum or string) to its plain name."""
    if reason is None:
        return None
    value = getattr(reason, "value", reason)
    return str(value) or None


def describe_empty_response(reason: Any) -> str:
    """Explain why Gemini produced no text, based on the candidate finish reason."""
    name = finish_reason_name(reason)

    if name == "SAFETY":
        return SAFETY_FINISH_MESSAGE
    if name == "RECITATION":
        return RECITATION_FINISH_MESSAGE
    if name and name != "STOP":
        return (
            f"Prompt generation stopped unexpectedly. Reason: {name}. "
            "Please check your script content."
        )
    return EMPTY_RESPONSE_MESSAGE
