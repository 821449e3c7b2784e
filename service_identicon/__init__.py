"""
Identicon service for Identidock.
"""
