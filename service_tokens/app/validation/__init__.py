"""
Token validation service.
"""
