"""
Maps List Scraper Test Suite

This package contains all automated tests for the scraper and its job API.

Structure:
- unit/: Fast, isolated unit tests
- fakes.py: In-memory page standing in for the browser
"""
