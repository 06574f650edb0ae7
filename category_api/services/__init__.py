"""
Service layer: input validation and orchestration of repository calls.
"""
