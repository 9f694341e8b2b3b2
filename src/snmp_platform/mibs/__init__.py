"""
MIB file handling: archive extraction, validation and upload to the backend.
"""

from .archive import MibArchiveProcessor, find_mib_files, validate_mib_content

__all__ = ["MibArchiveProcessor", "find_mib_files", "validate_mib_content"]
