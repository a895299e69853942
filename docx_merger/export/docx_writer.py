"""
DOCX package writer.

Serializes a (merged) document back into a ZIP container. The package is
written to a temporary file next to the output and moved into place, so a
failed write never leaves a partial file behind.
"""

from __future__ import annotations

import logging
import os
import tempfile
import zipfile
from pathlib import Path
from typing import Dict, Union

from ..exceptions import PackageError
from ..models.document import Document
from ..parser.package_reader import CONTENT_TYPES_PART

logger = logging.getLogger(__name__)


def collect_parts(document: Document) -> Dict[str, bytes]:
    """
    Every part of the package, content types first, in container order.

    The document's trees are serialized into the package before collecting.
    """
    document.sync_parts()
    package = document.package

    files_to_write: Dict[str, bytes] = {CONTENT_TYPES_PART: package.content_types_xml()}
    for part_name in package.part_names():
        if part_name == CONTENT_TYPES_PART:
            continue
        content = package.get_binary_content(part_name)
        if content is not None:
            files_to_write[part_name] = content
    return files_to_write


def write_document(document: Document, output_path: Union[str, Path]) -> Path:
    """
    Write a document to output_path atomically.

    Missing parent directories are created.

    Returns:
        The output path

    Raises:
        PackageError: If the package cannot be written
    """
    output_path = Path(output_path)
    files_to_write = collect_parts(document)

    temp_name = None
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            dir=output_path.parent, prefix=f".{output_path.stem}-", suffix=".docx.tmp", delete=False
        ) as handle:
            temp_name = handle.name
            with zipfile.ZipFile(handle, "w", zipfile.ZIP_DEFLATED) as zip_file:
                for file_name, content in files_to_write.items():
                    zip_file.writestr(file_name, content)
        os.replace(temp_name, output_path)
        temp_name = None
    except OSError as e:
        logger.error(f"Failed to write DOCX package {output_path}: {e}")
        raise PackageError("Cannot write merged package", path=str(output_path), details=str(e)) from e
    finally:
        if temp_name is not None and os.path.exists(temp_name):
            os.unlink(temp_name)

    logger.info(f"Document written to DOCX: {output_path} ({len(files_to_write)} parts)")
    return output_path
