"""
List views.

Responsibilities:
- Run the pure search -> filter -> sort pipeline over a fetched snapshot.
- Cache fetched snapshots until an invalidation arrives.
- Debounce text-driven re-queries and discard stale responses.
"""
