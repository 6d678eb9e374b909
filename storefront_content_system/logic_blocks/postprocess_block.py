"""
Postprocess Block - turns raw generator output into stored Markdown.
"""

import re

from storefront_content_system.core.errors import TruncatedOutput
from storefront_content_system.logic_blocks.prompt_block import COMPLETION_MARKER

# A fence that wraps the entire body, optionally tagged markdown/md.
_WRAPPING_FENCE = re.compile(r"^```(?:markdown|md)?[ \t]*\n([\s\S]*?)\n?```\s*$")
_OPENING_FENCE = re.compile(r"^```(?:markdown|md)?[ \t]*\n?")
_CLOSING_FENCE = re.compile(r"\n?```\s*$")


def strip_completion_marker(content: str, required: bool) -> str:
    """
    Remove the completion marker.

    Raises:
        TruncatedOutput: marker required but absent
    """
    if required and COMPLETION_MARKER not in content:
        raise TruncatedOutput(
            "The AI model was unable to generate the full document because the "
            "content was cut short. Please try again with a more specific prompt."
        )
    return content.replace(COMPLETION_MARKER, "").strip()


def strip_code_fence(content: str) -> str:
    """Unwrap a fenced block around the whole body; drop a dangling wrapper fence."""
    text = content.strip()

    match = _WRAPPING_FENCE.match(text)
    if match:
        return match.group(1).strip()

    # Odd fence count means one wrapper fence lost its partner.
    if text.count("```") % 2 == 1:
        if text.startswith("```"):
            text = _OPENING_FENCE.sub("", text, count=1)
        elif text.endswith("```"):
            text = _CLOSING_FENCE.sub("", text, count=1)

    return text.strip()


def finalize_content(content: str, require_marker: bool) -> str:
    """Marker check, then fence cleanup. Output is always raw Markdown."""
    return strip_code_fence(strip_completion_marker(content, require_marker))
