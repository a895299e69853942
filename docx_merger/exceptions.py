"""Custom exceptions for DOCX Merger."""

from typing import List, Optional


class DocxMergerError(Exception):
    """Base exception for DOCX Merger errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class PackageError(DocxMergerError):
    """Exception raised when a package cannot be read or written."""

    def __init__(self, message: str, path: Optional[str] = None, details: Optional[str] = None):
        super().__init__(message, details)
        self.path = path


class ParsingError(DocxMergerError):
    """Exception raised when a required part holds malformed markup."""

    def __init__(self, message: str, part_name: Optional[str] = None, details: Optional[str] = None):
        super().__init__(message, details)
        self.part_name = part_name


class StyleError(DocxMergerError):
    """Exception raised during style namespace merging."""

    pass


class NumberingError(DocxMergerError):
    """Exception raised during numbering namespace merging."""

    pass


class MediaError(DocxMergerError):
    """Exception raised during resource relocation."""

    pass


class UnresolvedReferenceError(DocxMergerError):
    """Exception raised when merged content references missing definitions."""

    def __init__(self, message: str, references: Optional[List] = None):
        self.references = list(references or [])
        details = None
        if self.references:
            details = ", ".join(str(ref) for ref in self.references[:5])
            if len(self.references) > 5:
                details += f" (+{len(self.references) - 5} more)"
        super().__init__(message, details)
