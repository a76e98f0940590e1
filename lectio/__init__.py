"""Daily Mass readings: liturgical calendar resolution, retrieval and local caching."""

__all__: list[str] = []
