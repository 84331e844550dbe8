"""
Core package - configuration, exceptions, logging and response envelope.
"""
