"""
SwingTrack - swing-sensor analytics for amateur baseball.

This package contains the complete application:
- core: Framework-agnostic analytics and goal logic
- infrastructure: Storage collaborators
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
