"""
Length Block - maps a product price to the document length the prompt asks for.
"""

from typing import List, Tuple

# (inclusive lower bound, length target), highest first. The 0 tier makes the
# table total over all non-negative prices.
PRICE_TIERS: List[Tuple[float, str]] = [
    (1000, "10-14 pages"),
    (600, "6-9 pages"),
    (300, "3-5 pages"),
    (0, "2-3 pages"),
]

AD_HOC_LENGTH_TARGET = "1500-2000 words"


def length_target_for_price(price: float) -> str:
    """
    Return the length target for a price.

    A price exactly on a threshold gets that (higher) tier.

    Raises:
        ValueError: negative price
    """
    if price < 0:
        raise ValueError(f"Price must be non-negative, got {price}")

    for lower_bound, target in PRICE_TIERS:
        if price >= lower_bound:
            return target

    # Unreachable while the table ends with a 0 bound.
    raise ValueError(f"No length tier for price {price}")
