"""
Pre-signed upload workflow for maestro_dms library.

Each file moves through VALIDATING -> PRESIGNING -> TRANSMITTING -> DONE,
or ends in ERROR. Bulk uploads run every file concurrently and join on all
of them before reporting.
"""

import asyncio
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Union

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from .exceptions import BulkUploadError, DMSError, LocalFileNotFoundError
from .models import FileConfig, PresignedUpload, coerce_payload
from .request_builder import StorageUploader
from .utils import (
    build_local_path,
    format_file_size,
    guess_content_type,
    resolve_file_extension,
)

FileConfigLike = Union[FileConfig, Mapping[str, Any]]
PresignFn = Callable[[], Awaitable[Any]]


def _local_file_size(path: str) -> Optional[int]:
    """Size of a regular file, or None when there is nothing to upload."""
    try:
        if not os.path.isfile(path):
            return None
        return os.path.getsize(path)
    except OSError:
        return None


class UploadState(Enum):
    """Stages of a single file upload."""
    VALIDATING = "validating"
    PRESIGNING = "presigning"
    TRANSMITTING = "transmitting"
    DONE = "done"
    ERROR = "error"


@dataclass
class UploadOutcome:
    """Result of one file in a settled bulk upload."""
    filename: str
    state: UploadState
    local_path: str = ""
    upload: Optional[PresignedUpload] = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.state is UploadState.DONE


class UploadJob:
    """Tracks one file through the upload states."""

    def __init__(self, file_config: FileConfig):
        self.file_config = file_config
        self.state = UploadState.VALIDATING
        self.local_path = build_local_path(file_config.directory, file_config.filename)
        self.extension = resolve_file_extension(file_config.filename, file_config.file_extension)

    @property
    def filename(self) -> str:
        return self.file_config.filename

    def advance(self, state: UploadState) -> None:
        logger.debug(f"Upload {self.filename}: {self.state.value} -> {state.value}")
        self.state = state


class UploadOrchestrator:
    """Runs the pre-sign then storage POST sequence for local files."""

    def __init__(self, presign: PresignFn, storage: StorageUploader):
        """
        Args:
            presign: Coroutine factory returning the raw pre-sign response
            storage: Anonymous uploader for the signed storage POST
        """
        self._presign = presign
        self._storage = storage

    async def upload_file(self, file_config: FileConfigLike) -> PresignedUpload:
        """
        Upload a single local file through a pre-signed POST.

        Args:
            file_config: directory, filename and optional extension override

        Returns:
            PresignedUpload carrying original_filename and file_extension

        Raises:
            LocalFileNotFoundError: If the file does not exist (no remote call is made)
            RequestError: If the pre-sign call fails
            StorageUploadError: If the storage POST fails
        """
        job = UploadJob(coerce_payload(FileConfig, file_config))
        try:
            return await self._run(job)
        except Exception:
            job.advance(UploadState.ERROR)
            raise

    async def _run(self, job: UploadJob) -> PresignedUpload:
        size = await asyncio.to_thread(_local_file_size, job.local_path)
        if size is None:
            raise self._not_found(job)

        job.advance(UploadState.PRESIGNING)
        upload = self._parse_presign(await self._presign())

        job.advance(UploadState.TRANSMITTING)
        content_type = guess_content_type(job.extension)
        fields = {
            "key": f"{upload.key}.{job.extension}",
            "Content-Type": content_type,
            "AWSAccessKeyId": upload.aws_access_key_id or "",
            "acl": upload.acl or "",
            "policy": upload.policy or "",
            "signature": upload.signature or "",
        }
        try:
            stream = await asyncio.to_thread(open, job.local_path, "rb")
        except FileNotFoundError as e:
            # removed between the size check and the open
            raise self._not_found(job) from e
        with stream:
            await self._storage.post_form(
                upload.url, fields, (job.filename, stream, content_type)
            )

        upload.original_filename = job.filename
        upload.file_extension = job.extension
        job.advance(UploadState.DONE)
        logger.info(f"Uploaded {job.filename} ({format_file_size(size)}) as {fields['key']}")
        return upload

    @staticmethod
    def _not_found(job: UploadJob) -> LocalFileNotFoundError:
        return LocalFileNotFoundError(f"File not found: {job.local_path}", path=job.local_path)

    @staticmethod
    def _parse_presign(body: Any) -> PresignedUpload:
        if not isinstance(body, Mapping):
            raise DMSError("Malformed pre-sign response", {"body": body})
        try:
            return PresignedUpload.model_validate(dict(body))
        except PydanticValidationError as e:
            raise DMSError(f"Malformed pre-sign response: {str(e)}")

    async def _settle(self, file_configs: Iterable[FileConfigLike]) -> List[UploadOutcome]:
        configs = [coerce_payload(FileConfig, fc) for fc in file_configs]
        tasks = [asyncio.create_task(self.upload_file(fc)) for fc in configs]
        if tasks:
            await asyncio.wait(tasks)

        outcomes = []
        for fc, task in zip(configs, tasks):
            local_path = build_local_path(fc.directory, fc.filename)
            error = task.exception()
            if error is None:
                outcomes.append(UploadOutcome(fc.filename, UploadState.DONE, local_path, upload=task.result()))
            else:
                outcomes.append(UploadOutcome(fc.filename, UploadState.ERROR, local_path, error=error))
        return outcomes

    async def upload_bulk_files(self, file_configs: Iterable[FileConfigLike]) -> Dict[str, PresignedUpload]:
        """
        Upload every file concurrently, all or nothing.

        Args:
            file_configs: Files to upload

        Returns:
            Dict mapping original filename to its PresignedUpload. Files
            sharing a name across directories collide here, the last one
            wins; use upload_bulk_files_settled to keep every result.

        Raises:
            BulkUploadError: If any file failed, with failures keyed by
                local path; the first failure is chained
        """
        outcomes = await self._settle(file_configs)
        failures = {o.local_path: o.error for o in outcomes if not o.succeeded}

        if failures:
            logger.error(f"Bulk upload failed for {len(failures)} of {len(outcomes)} files")
            first = next(iter(failures.values()))
            raise BulkUploadError(
                f"Bulk upload failed for {len(failures)} of {len(outcomes)} files",
                failures=failures,
            ) from first

        return {o.upload.original_filename: o.upload for o in outcomes}

    async def upload_bulk_files_settled(self, file_configs: Iterable[FileConfigLike]) -> List[UploadOutcome]:
        """
        Upload every file concurrently and report each outcome.

        Member failures are returned, not raised.
        """
        outcomes = await self._settle(file_configs)
        done = sum(1 for o in outcomes if o.succeeded)
        logger.info(f"Bulk upload settled: {done} of {len(outcomes)} files uploaded")
        return outcomes
