"""
PostgreSQL storage and external data adapters.
"""
