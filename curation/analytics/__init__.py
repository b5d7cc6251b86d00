"""
Curation analytics.

Responsibilities:
- Count dishes and restaurants per municipality.
- Report the currently featured (flagged and ranked) items.
"""
