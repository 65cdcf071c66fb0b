"""
Infrastructure Package
======================

Technical adapters shared across modules:
- database: SQLAlchemy async engine and sessions
- llm: AI gateway clients (Workers AI, OpenAI-compatible, mock)
"""
