"""forgepub - publish releases and artifacts to a Gitea instance."""

__version__ = "0.1.0"
