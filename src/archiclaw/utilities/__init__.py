"""
archiclaw.utilities - Shared file helpers.
"""
