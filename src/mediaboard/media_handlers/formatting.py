"""
Built-in text formatters.

Each formatter transforms the running ``formatted`` and ``stripped`` values
of a TextFormattingEvent; the bus runs them in priority order.
"""

import re

from mediaboard.core.extensions import FormatterExtension


_LINE_ENDINGS = re.compile(r'\r\n?')
_TRAILING_SPACE = re.compile(r'[ \t]+$', re.MULTILINE)


class WhitespaceStripper(FormatterExtension):
    """Normalise line endings and trailing blanks; the stripped form is a single line."""

    priority = 45

    def format(self, text: str) -> str:
        text = _LINE_ENDINGS.sub('\n', text)
        return _TRAILING_SPACE.sub('', text)

    def strip(self, text: str) -> str:
        return ' '.join(text.split())


class NewlineFormatter(FormatterExtension):

    def format(self, text: str) -> str:
        return _LINE_ENDINGS.sub('\n', text).replace('\n', '<br>')

    def strip(self, text: str) -> str:
        return text
