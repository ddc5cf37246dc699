"""Data models and constraint parsing for package manager resolution."""
