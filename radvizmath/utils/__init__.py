"""
Utility helpers for the radvizmath package.
"""
