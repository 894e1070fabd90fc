"""orgcheck: audit an organization's repositories against its CI tooling standard."""

__version__ = "0.3.0"

__all__ = ["__version__"]
