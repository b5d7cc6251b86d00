"""
Catalog layer.

Responsibilities:
- Define the Municipality, Dish, Restaurant and link models.
- Normalize inconsistently encoded list fields at the boundary.
- Provide the remote data gateway (in-memory and HTTP) the core calls through.
- Seed an in-memory gateway from CSV exports.
"""
