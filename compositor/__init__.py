"""
Promo Compositor

Renders branded marketing creatives (PNG, PDF, MP4) from a profile photo,
a product photo and contact details.
"""

__version__ = "0.1.0"
