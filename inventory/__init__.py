"""Inventory item persistence: SQLite store, live queries, repository and container."""
