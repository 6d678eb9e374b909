"""
Formatting Block - category and product specific formatting policy.

Policy lives in FORMATTING_RULES; each rule is a predicate plus the
instruction it contributes to the prompt.
"""

from dataclasses import dataclass
from typing import Callable, FrozenSet, List

from storefront_content_system.core.models import ProductCategory, ProductDescriptor

SHORTCUT_PRODUCT_IDS: FrozenSet[str] = frozenset({"36"})

NO_CONCLUSION_CATEGORIES: FrozenSet[ProductCategory] = frozenset(
    {
        ProductCategory.CODING_TECH,
        ProductCategory.PLANNERS_ORGANIZERS,
        ProductCategory.PERSONAL_GROWTH,
        ProductCategory.CODE_LIBRARIES,
    }
)

BASE_FORMATTING = (
    "Break down complex topics into smaller, digestible sections with clear headings. "
    "Use lists, tables, code blocks (for technical topics), and examples to enhance understanding."
)

SHORTCUT_FORMATTING = (
    "**Formatting for Shortcuts:** For lists of shortcuts (like keyboard shortcuts), "
    'please use a Markdown table with two columns: "Shortcut" and "Description". '
    "This will provide a clear and organized layout for the user."
)


@dataclass(frozen=True)
class FormattingRule:
    name: str
    applies: Callable[[ProductDescriptor], bool]
    instruction: str


def is_shortcut_list(product: ProductDescriptor) -> bool:
    return product.id in SHORTCUT_PRODUCT_IDS or "shortcuts" in product.name.lower()


def omits_conclusion(product: ProductDescriptor) -> bool:
    """True when the document must end on its last main point."""
    return product.category in NO_CONCLUSION_CATEGORIES


FORMATTING_RULES: List[FormattingRule] = [
    FormattingRule("base", lambda product: True, BASE_FORMATTING),
    FormattingRule("shortcut_table", is_shortcut_list, SHORTCUT_FORMATTING),
]


def formatting_instructions(product: ProductDescriptor) -> List[str]:
    """Instructions from every rule that applies, in table order."""
    return [rule.instruction for rule in FORMATTING_RULES if rule.applies(product)]


NO_META_COMMENTARY = (
    "Your output must BE the document, not a description of it. Do not write "
    "meta-commentary. Your response should contain only the raw Markdown content "
    "for the document itself."
)

NO_CONCLUSION = (
    "This document belongs to a category that must **NOT include a conclusion "
    "or summary section** ({categories}). The document should end on its last main point."
).format(
    categories=", ".join(
        f"'{c.value}'" for c in sorted(NO_CONCLUSION_CATEGORIES, key=lambda c: c.value)
    )
)

# Hard constraints, listed under "Crucial Instructions" in table order.
CONSTRAINT_RULES: List[FormattingRule] = [
    FormattingRule("document_only", lambda product: True, NO_META_COMMENTARY),
    FormattingRule("no_conclusion", omits_conclusion, NO_CONCLUSION),
]


def constraint_instructions(product: ProductDescriptor) -> List[str]:
    return [rule.instruction for rule in CONSTRAINT_RULES if rule.applies(product)]
