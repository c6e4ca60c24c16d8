"""
CLI module for Entity Intelligence.

Provides command-line interface using Typer:
- analyze: Analyze a live page by URL
- analyze-text: Analyze pasted content
- config: Configuration management
"""

from entity_intel.cli.main import app

__all__ = ["app"]
