"""Presentation helpers for the command line."""

from .error_presenter import ErrorPresenter

__all__ = ["ErrorPresenter"]
