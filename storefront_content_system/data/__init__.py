"""Storefront catalog data."""
