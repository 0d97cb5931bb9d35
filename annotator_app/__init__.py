"""
Screenshot Annotator

Annotation data model, persistence and HTTP service for annotating webapp
screenshots with analytics events.
"""

__version__ = "1.0.0"
