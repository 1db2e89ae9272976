"""Coachflow - workflow orchestration core for the resume/interview coaching agents."""

__version__ = "0.1.0"
