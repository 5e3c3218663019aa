"""Renderers and delivery for merged reports."""

from .console import print_report
from .email import send_email_report
from .html import render_html
from .text import render_text

__all__ = [
    "print_report",
    "render_html",
    "render_text",
    "send_email_report",
]
