"""Life Tasks: personal task management API with AI-assisted planning."""

__version__ = "0.1.0"
