"""Presentation of validation reports."""

from .console import render_diagnostic, render_json, render_report

__all__ = ["render_diagnostic", "render_json", "render_report"]
