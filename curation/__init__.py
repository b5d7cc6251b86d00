"""
Featured-item curation service.

Responsibilities:
- Rank up to three featured dishes and restaurants per municipality scope.
- Link dishes to the restaurants that serve them.
- Search, filter and sort list views over fetched snapshots.
"""
