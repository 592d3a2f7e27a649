# FILE: certquiz/models/__init__.py
"""
Pydantic models for questions, submissions, results and sessions
"""
from certquiz.models.questions import *
from certquiz.models.submissions import *
from certquiz.models.results import *
from certquiz.models.sessions import *
