"""
pagegrab - Fetch a web page and pull structured data out of its HTML.

Title, plain text, links, images and tables, in a shape that is easy
to pipe into scripts.
"""

__version__ = "0.1.0"
__app_name__ = "pagegrab"
