"""
Registrar: academic records manager for a small institution.

Keeps students, instructors, courses and enrollments in memory, enforces
the enrollment rules (duplicates, credit ceiling), computes GPA, renders
transcripts and persists everything to flat comma-delimited files.
"""

__version__ = "1.0.0"
__author__ = "Registrar Development Team"
__description__ = "Academic records manager with flat-file persistence"
