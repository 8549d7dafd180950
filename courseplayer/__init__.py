"""
CoursePlayer - Course progression and assessment engine for the learning client.

Subpackages:
- schemas: Pydantic models for course content, quizzes and progress
- classroom: access policy, navigation, quiz engine, progress ledger, certification
- api: backend collaborators (REST client, YAML course file)
"""

__version__ = "0.1.0"
