"""
Rank assignment.

Responsibilities:
- Keep at most one holder per rank slot (1-3) within a scope.
- Detect slot conflicts and require an explicit decision before displacing.
- Offer an optimistic command with a compensating undo for local snapshots.
"""
