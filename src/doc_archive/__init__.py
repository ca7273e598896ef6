"""Document archive: portable import/export of categories, documents and attachments."""

__version__ = "0.1.0"
