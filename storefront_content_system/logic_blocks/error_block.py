"""
Error Block - classifies generator failures into user-facing categories.

Rules are evaluated in order; the first matching predicate wins and
anything unmatched is GENERIC.
"""

from typing import Callable, Dict, List, Optional, Tuple

from storefront_content_system.core.errors import ErrorKind


def _contains_any(*needles: str) -> Callable[[str], bool]:
    def predicate(message: str) -> bool:
        lowered = message.lower()
        return any(needle in lowered for needle in needles)

    return predicate


CLASSIFICATION_RULES: List[Tuple[Callable[[str], bool], ErrorKind]] = [
    (_contains_any("api key not valid", "invalid api key", "unauthorized", "401"), ErrorKind.CREDENTIAL_INVALID),
    (_contains_any("leaked", "compromised"), ErrorKind.CREDENTIAL_COMPROMISED),
    (_contains_any("503", "model is overloaded", "rate limit", "quota", "429"), ErrorKind.OVERLOADED),
]

USER_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.CREDENTIAL_INVALID: "Your AI API key is not valid. Please check your configuration and make sure it is correct.",
    ErrorKind.CREDENTIAL_COMPROMISED: "Your AI API key has been compromised and cannot be used. Please generate a new key.",
    ErrorKind.OVERLOADED: "The AI model is currently busy or you have exceeded your rate limit. Please wait a moment and try again.",
    ErrorKind.TRUNCATED: "The AI model was unable to generate the full document because the content was cut short. Please try again with a more specific prompt.",
    ErrorKind.EMPTY: "The AI model did not return any content. Please try again with a different prompt.",
}

GENERIC_MESSAGE = "An unexpected error occurred. Please check the server logs for details."


def classify_error(message: Optional[str]) -> ErrorKind:
    if not message:
        return ErrorKind.GENERIC
    for predicate, kind in CLASSIFICATION_RULES:
        if predicate(message):
            return kind
    return ErrorKind.GENERIC


def user_message(kind: ErrorKind, raw_message: Optional[str] = None) -> str:
    """Display text for a kind. GENERIC shows the raw message when there is one."""
    if kind in USER_MESSAGES:
        return USER_MESSAGES[kind]
    return raw_message or GENERIC_MESSAGE
