"""commit-resume: turn GitHub commit history into a resume."""

__version__ = "0.3.0"
