"""
HTTP front end for scrape jobs (FastAPI).
"""

from src.api.app import create_app

__all__ = ["create_app"]
