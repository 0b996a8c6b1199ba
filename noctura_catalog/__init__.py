"""Noctura catalog API.

Furniture catalog service: products, categories, paginated listing,
search and image-bearing product creation.
"""

__version__ = "0.1.0"
