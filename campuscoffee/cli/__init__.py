"""
Command line interfaces.
"""
