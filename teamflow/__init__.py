# teamflow
"""Team and project tracker with a role-gated project status workflow."""

__version__ = "0.2.0"
