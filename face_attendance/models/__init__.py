"""
Models package - data structures for the application.

Subpackages:
- domain/ - Domain models (gallery entries, attendance records, matches)
- requests/ - Request DTOs (API input)
"""
