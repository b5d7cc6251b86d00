"""
Dish <-> restaurant association management.

Responsibilities:
- Idempotent link / unlink of a single pair.
- Best-effort bulk linking over a cross product with per-pair outcomes.
- Read-only projections of the current linkage.
"""
