"""Insert new job entries into DOCX resumes, reusing the existing formatting."""

from .errors import (
    ErrorKind,
    FormatError,
    InvalidJobDetails,
    PatchError,
    SectionNotFound,
    TemplateNotFound,
)
from .patcher import patch, patch_file

__all__ = [
    "ErrorKind",
    "FormatError",
    "InvalidJobDetails",
    "PatchError",
    "SectionNotFound",
    "TemplateNotFound",
    "patch",
    "patch_file",
]
