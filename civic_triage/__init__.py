"""Civic report triage service package.

Having this file ensures the 'civic_triage' directory is recognized as a
standard Python package during test discovery and installation.
"""

__all__: list[str] = []
