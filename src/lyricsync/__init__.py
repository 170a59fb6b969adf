"""Keep a line-timed lyric transcript in sync with the playing track."""

__version__ = "0.1.0"
