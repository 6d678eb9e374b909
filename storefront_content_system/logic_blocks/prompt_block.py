"""
Prompt Block - builds the prompts sent to the Remote Content Generator.

Two variants exist:
- MARKED: the generator must end with COMPLETION_MARKER; a response without it
  is treated as truncated.
- PLAIN: no marker is requested or required.
Length always comes from the price tiers for catalog products and from a fixed
word range for ad hoc requests.
"""

from enum import Enum

from storefront_content_system.core.models import ProductDescriptor
from storefront_content_system.logic_blocks.formatting_block import (
    constraint_instructions,
    formatting_instructions,
)
from storefront_content_system.logic_blocks.length_block import (
    AD_HOC_LENGTH_TARGET,
    length_target_for_price,
)

COMPLETION_MARKER = "<!-- DOCUMENT_COMPLETE -->"


class PromptVariant(str, Enum):
    MARKED = "marked"
    PLAIN = "plain"

    @property
    def requires_marker(self) -> bool:
        return self is PromptVariant.MARKED


GENERATOR_SYSTEM_PROMPT = """You are an expert content creator. Your task is to generate content for a document in Markdown format based on a user's prompt. The goal is to provide a high-quality, useful document that is clear and well-structured.

**Content Depth and Quality:**
- The content should be **well-detailed and clear**, providing substantial value.
- Structure the document professionally using Markdown elements like headings (#, ##, ###), lists (* or -), bold (**text**), and tables where appropriate.

**Crucial Instruction:** Your output must BE the document, not a description of it. Do not write meta-commentary about the document, such as 'In this PDF you will find...' or 'Why choose this guide?'.

First, create a short, descriptive title for the document based on the user's prompt.
Then, generate the main body of the content.

Respond ONLY with a JSON object of the form {"title": "...", "content": "..."} where content is the Markdown body.

Ensure the content is coherent and directly addresses the user's request. Pay close attention to any specific instructions in the user prompt regarding structure, such as the inclusion or exclusion of a conclusion."""

_MARKER_INSTRUCTION = f"""
**Completeness Instruction:**
- To signify that you have finished the entire document and not been cut off, you **MUST** end the content with the following exact text on a new line:
`{COMPLETION_MARKER}`
- There should be no text after this marker."""


def build_product_prompt(
    product: ProductDescriptor, variant: PromptVariant = PromptVariant.MARKED
) -> str:
    """Prompt for a catalog product's long-form document."""
    length_target = length_target_for_price(product.price)
    formatting = "\n\n".join(formatting_instructions(product))

    constraints = "\n".join(
        f"{i}.  {text}" for i, text in enumerate(constraint_instructions(product), start=1)
    )

    prompt = f"""Generate detailed, comprehensive content for a digital product with the following details:
- Name: "{product.name}"
- Description: "{product.description}"
- Category: "{product.category.value}"
- Keywords: "{', '.join(product.tags)}"

**Content Depth and Length:**
- The desired length for this document is **{length_target}** in a standard document. Please adhere to this length.
- {formatting}

**Crucial Instructions:**
{constraints}"""

    if variant.requires_marker:
        prompt += "\n" + _MARKER_INSTRUCTION
    return prompt


def build_ad_hoc_prompt(
    user_prompt: str, variant: PromptVariant = PromptVariant.MARKED
) -> str:
    """Prompt for a user-described document."""
    prompt = f"""Aim for a word count around **{AD_HOC_LENGTH_TARGET}**. The goal is a solid, valuable document, not an exhaustive encyclopedia.

User Prompt: {user_prompt.strip()}"""

    if variant.requires_marker:
        prompt += "\n" + _MARKER_INSTRUCTION
    return prompt
