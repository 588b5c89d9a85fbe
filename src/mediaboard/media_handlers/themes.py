"""
Default presentation for the media handlers.

Themes only produce opaque markup fragments and hand them to the page;
page layout belongs to whoever renders the page.
"""

from html import escape

from mediaboard.core.extensions import Theme
from mediaboard.core.models import Image
from mediaboard.core.page import Block, Page


class PixelFileHandlerTheme(Theme):

    def display_image(self, page: Page, image: Image) -> None:
        html = (
            f"<img alt='main image' id='main_image' src='{escape(image.get_image_link())}' "
            f"data-width='{image.width}' data-height='{image.height}'>"
        )
        page.add_block(Block("Image", html, "main", 10))


class PdfFileHandlerTheme(Theme):

    def display_image(self, page: Page, image: Image) -> None:
        # the thumbnail doubles as the fallback preview
        html = (
            f"<a href='{escape(image.get_image_link())}'>"
            f"<img src='{escape(image.get_thumb_link())}' /></a>"
        )
        page.add_block(Block("PDF", html, "main", 10))
