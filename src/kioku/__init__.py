"""kioku: spaced-repetition scheduling for vocabulary review."""

from kioku.consts import VERSION

__version__ = VERSION
