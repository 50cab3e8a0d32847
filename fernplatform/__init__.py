"""Domain services for a test-reporting platform: auth, projects and tags."""

__version__ = "0.1.0"