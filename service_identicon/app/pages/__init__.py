"""
HTML pages served by the Identicon Service.
"""

from .form_page import render_form_page

__all__ = ["render_form_page"]
