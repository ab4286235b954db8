"""
Pattern-based extraction of values from the known registration pages.
"""

from .pages import AUTHORIZE_PAGE, WELCOME_PAGE, PageShape, registration_data_page
from .patterns import Extractor, TagPattern

__all__ = [
    "AUTHORIZE_PAGE",
    "WELCOME_PAGE",
    "Extractor",
    "PageShape",
    "TagPattern",
    "registration_data_page",
]
