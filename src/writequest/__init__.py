"""WriteQuest: gamified writing practice with AI-assisted feedback."""

__version__ = "0.1.0"
