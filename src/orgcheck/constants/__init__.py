"""Constant tables shared across orgcheck subpackages."""
