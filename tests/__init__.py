"""
Test suite for Entity Intelligence.

Provides tests for all modules:
- Unit tests for segmentation, extraction, matching and scoring
- Knowledge-source tests against a fake knowledge web
- End-to-end pipeline and CLI tests
"""
