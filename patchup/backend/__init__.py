"""
PatchUp Backend Application.

A FastAPI service that extracts the technical patch list from PDF tech
riders using AI (OpenAI vision models) and stores it per artist.
"""

__version__ = "1.0.0"
