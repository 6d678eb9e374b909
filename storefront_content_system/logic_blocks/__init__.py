"""Logic blocks package - Pure prompt, formatting and cleanup functions."""
from .length_block import PRICE_TIERS, length_target_for_price
from .formatting_block import (
    CONSTRAINT_RULES,
    FORMATTING_RULES,
    constraint_instructions,
    formatting_instructions,
    omits_conclusion,
)
from .prompt_block import (
    COMPLETION_MARKER,
    GENERATOR_SYSTEM_PROMPT,
    PromptVariant,
    build_ad_hoc_prompt,
    build_product_prompt,
)
from .postprocess_block import finalize_content, strip_code_fence, strip_completion_marker
from .error_block import classify_error, user_message

__all__ = [
    "PRICE_TIERS",
    "length_target_for_price",
    "CONSTRAINT_RULES",
    "FORMATTING_RULES",
    "constraint_instructions",
    "formatting_instructions",
    "omits_conclusion",
    "COMPLETION_MARKER",
    "GENERATOR_SYSTEM_PROMPT",
    "PromptVariant",
    "build_ad_hoc_prompt",
    "build_product_prompt",
    "finalize_content",
    "strip_code_fence",
    "strip_completion_marker",
    "classify_error",
    "user_message",
]
