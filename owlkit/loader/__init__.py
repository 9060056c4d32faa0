"""In-memory caches of bridge configuration tables and access to transaction tables."""