"""Filesystem access for attachment payloads and work directories."""

from doc_archive.storage.attachment_storage import AttachmentStorage, detect_filetype

__all__ = ["AttachmentStorage", "detect_filetype"]
