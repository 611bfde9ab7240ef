"""
Campaign Pricing Package

Deterministic pricing for sponsorship campaigns and loyalty point redemptions.
Resolves campaign totals using Package → Duration → Add-ons → Discounts pipeline.
"""

__version__ = "1.0.0"
