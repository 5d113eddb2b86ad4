"""
Core Package

Configuration, error envelope, provider registry and application wiring.
"""
