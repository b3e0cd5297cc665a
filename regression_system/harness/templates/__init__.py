"""Jinja2 templates for run reports."""

from pathlib import Path

TEMPLATE_DIR = Path(__file__).parent
