"""
MIB archive extraction and validation.

Uploaded archives are unpacked into a private scratch directory, every MIB
file found is validated, and valid modules are stored through the backend's
``mibs`` resource. The scratch directory is always removed afterwards.
"""

import asyncio
import logging
import re
import shutil
import tempfile
import zipfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from snmp_platform.backend.client import BackendClient
from snmp_platform.core.errors import BackendError

logger = logging.getLogger(__name__)

MIB_EXTENSIONS = (".mib", ".txt", ".my")

_DEFINITIONS = re.compile(r"([A-Za-z][\w-]*)?\s*DEFINITIONS\s*::=\s*BEGIN", re.IGNORECASE)
# END closes the module on its own line; trailing comments may follow
_TRAILING_END = re.compile(r"\bEND\s*$", re.IGNORECASE | re.MULTILINE)


class ArchiveResult(BaseModel):
    """Outcome of processing one uploaded archive."""

    success: bool = True
    success_count: int = Field(0, serialization_alias="successCount")
    total_files: int = Field(0, serialization_alias="totalFiles")
    errors: List[str] = Field(default_factory=list)
    stored: List[str] = Field(default_factory=list)

    @property
    def message(self) -> str:
        text = f"Processed {self.success_count} MIB file(s)"
        if self.errors:
            text += f", {len(self.errors)} problem(s) reported"
        return text

    def to_api(self) -> Dict[str, Any]:
        body = self.model_dump(by_alias=True)
        body["message"] = self.message
        return body


def validate_mib_content(content: str) -> bool:
    """A MIB module has a ``DEFINITIONS ::= BEGIN`` header and a line ending in ``END``."""
    text = content.strip()
    return bool(_DEFINITIONS.search(text)) and bool(_TRAILING_END.search(text))


def mib_module_name(content: str) -> Optional[str]:
    match = _DEFINITIONS.search(content)
    if match and match.group(1):
        return match.group(1)
    return None


def find_mib_files(directory: Path) -> List[Path]:
    """All MIB files below ``directory``, in a stable order."""
    return sorted(
        path
        for path in Path(directory).rglob("*")
        if path.is_file() and path.suffix.lower() in MIB_EXTENSIONS
    )


def safe_extract(archive: zipfile.ZipFile, destination: Path) -> List[str]:
    """
    Extract members that stay inside ``destination``.

    Returns:
        Error messages for rejected members
    """
    errors: List[str] = []
    root = destination.resolve()

    for member in archive.infolist():
        target = (destination / member.filename).resolve()
        if target != root and root not in target.parents:
            logger.warning(f"Rejected archive member outside extraction dir: {member.filename}")
            errors.append(f"{member.filename}: path escapes the archive")
            continue
        archive.extract(member, destination)

    return errors


class MibArchiveProcessor:
    """
    Processes uploaded MIB archives.

    Unpacking, scanning and reading run in the default executor; only the
    backend calls run on the event loop.

    Usage:
        processor = MibArchiveProcessor(backend, temp_root="temp/mib-extract")
        result = await processor.process("vendor-mibs.zip", data)
    """

    def __init__(self, backend: BackendClient, temp_root: str = "temp/mib-extract"):
        self.backend = backend
        self.temp_root = Path(temp_root)

    async def process(
        self,
        filename: str,
        data: bytes,
        headers: Optional[Dict[str, str]] = None,
    ) -> ArchiveResult:
        result = ArchiveResult()

        if not filename.lower().endswith(".zip"):
            result.errors.append(f"Unsupported archive format: {filename}")
            return result

        loop = asyncio.get_running_loop()
        unpack_errors, mib_files = await loop.run_in_executor(None, self.unpack, data)
        result.errors.extend(unpack_errors)
        result.total_files = len(mib_files)

        for name, content in mib_files:
            await self._store_file(name, content, result, headers)

        logger.info(
            f"MIB archive {filename}: {result.success_count}/{result.total_files} stored, "
            f"{len(result.errors)} error(s)"
        )
        return result

    def unpack(self, data: bytes) -> Tuple[List[str], List[Tuple[str, str]]]:
        """
        Extract an archive into a scratch directory and read its MIB files.

        Blocking. The scratch directory is removed before returning.

        Returns:
            (error messages, [(file name, content), ...])
        """
        self.temp_root.mkdir(parents=True, exist_ok=True)
        work_dir = Path(tempfile.mkdtemp(prefix="upload-", dir=self.temp_root))

        try:
            zip_path = work_dir / "upload.zip"
            zip_path.write_bytes(data)
            extract_dir = work_dir / "extracted"
            extract_dir.mkdir()

            try:
                with zipfile.ZipFile(zip_path) as archive:
                    errors = safe_extract(archive, extract_dir)
            except zipfile.BadZipFile as e:
                return [f"Archive could not be read: {e}"], []

            files = [
                (path.name, path.read_text(encoding="utf-8", errors="replace"))
                for path in find_mib_files(extract_dir)
            ]
            return errors, files
        finally:
            shutil.rmtree(work_dir, ignore_errors=True)

    async def _store_file(
        self,
        name: str,
        content: str,
        result: ArchiveResult,
        headers: Optional[Dict[str, str]],
    ) -> None:
        if not validate_mib_content(content):
            result.errors.append(f"{name}: invalid MIB file format")
            return

        payload = {
            "name": mib_module_name(content) or Path(name).stem,
            "filename": name,
            "content": content,
        }
        try:
            await self.backend.post_json("mibs", payload, headers=headers)
        except BackendError as e:
            result.errors.append(f"{name}: storage failed ({e.message})")
            return

        result.success_count += 1
        result.stored.append(name)
