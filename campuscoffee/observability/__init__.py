"""
Logging and metrics for CampusCoffee.
"""
