"""Storefront catalog API.

Monolithic e-commerce backend: JWT authentication with role-based access,
product and category management, paginated catalogue search and a small
analytics surface reporting on search performance.
"""

__version__ = "1.0.0"
