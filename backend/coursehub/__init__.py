"""
Coursehub backend: courses, lessons and topics for teachers and students.
"""

__version__ = "1.0.0"
