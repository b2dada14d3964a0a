"""Client-side paginated history cache.

The package accumulates per-account record histories from a cursor based
listing backend and keeps them reconciled across page fetches.
"""

__all__: list[str] = []
