"""
Domain core: models, address normalization, conflict policy and services.
"""
