"""Iconsmith - Build icon fonts from curated SVG icon collections.

Iconsmith composes a collection of single-glyph SVG icons into one SVG font,
then derives TTF, EOT, WOFF and WOFF2 fonts from it. Every icon gets a
private-use code point in input order.

Example:
    $ iconsmith build icons/ --family "Aviala Icons"

This will create dist/fonts/<collection>/AvialaIcons<Collection>.{svg,ttf,eot,woff,woff2}
for every subdirectory of icons/.
"""

__version__ = "0.1.0"
__author__ = "Iconsmith contributors"

__all__ = ["__author__", "__version__"]
