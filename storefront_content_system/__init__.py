"""
Storefront Content System - AI-generated long-form documents for a digital-goods storefront.
"""

__version__ = "1.0.0"

from .content_gen_system import ContentGenerationSystem

__all__ = ["ContentGenerationSystem"]
