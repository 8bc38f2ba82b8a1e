"""
Per-domain repository modules for database access.

Routers call these functions directly; each module owns the queries and
writes for one entity, with `duplicates` shared by events and venues.
"""
