"""Media staging service: copies installation media to local disk."""

from pathlib import Path
from typing import Optional
import logging

import aiofiles
import aiofiles.os
import httpx

from upgrader.models.results import MediaStagingState
from upgrader.models.status import StagingAction, StagingFailure
from upgrader.utils.verification import file_size, verify_size


def is_url(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


class MediaStager:
    """Stages a remote image locally with skip-if-identical logic.

    Size equality is the only integrity check. There is no resume: a bad
    or stale copy is deleted and copied again in full.
    """

    def __init__(self, chunk_size: int = 1024 * 1024, http_timeout: float = 30.0):
        """Initialize media stager.

        Args:
            chunk_size: Copy buffer size (default 1MB)
            http_timeout: Timeout for HTTP requests in seconds
        """
        self.logger = logging.getLogger("upgrader.staging")
        self.chunk_size = chunk_size
        self.http_timeout = http_timeout

    async def stage(self, remote_source: str, local_destination: Path) -> MediaStagingState:
        """Make sure local_destination holds a copy of remote_source.

        Args:
            remote_source: UNC/filesystem path or http(s) URL
            local_destination: Local path for the staged image

        Returns:
            MediaStagingState describing the action taken. An unreachable
            source with an existing local copy yields stale_tolerated: the
            local file is used without verification.
        """
        local_destination = Path(local_destination)
        source_size = await self._probe_source(remote_source)
        local_size: Optional[int] = None
        recopy = False

        def state(action: StagingAction, **kwargs) -> MediaStagingState:
            return MediaStagingState(
                remote_source=remote_source,
                local_destination=local_destination,
                source_size=source_size,
                local_size=kwargs.pop("local_size", local_size),
                action=action,
                **kwargs,
            )

        def unwritable(action: str, e: OSError) -> MediaStagingState:
            error = f"cannot {action} {local_destination}: {e}"
            self.logger.error(f"LOCAL_MEDIA_UNWRITABLE: {error}")
            return state(
                StagingAction.FAILED,
                failure=StagingFailure.LOCAL_MEDIA_UNWRITABLE,
                error=error,
            )

        try:
            local_destination.parent.mkdir(parents=True, exist_ok=True)
            local_size = file_size(local_destination)
        except OSError as e:
            return unwritable("prepare", e)

        if local_size is not None:
            if source_size is None:
                self.logger.warning(
                    f"Remote source {remote_source} unreachable, using existing "
                    f"local copy ({local_size} bytes) without verification; "
                    f"it may be outdated or incomplete"
                )
                return state(StagingAction.STALE_TOLERATED)

            if local_size == source_size:
                self.logger.info(
                    f"Local media matches source ({local_size} bytes), skipping copy"
                )
                return state(StagingAction.SKIPPED)

            self.logger.warning(
                f"Local media size {local_size} differs from source size "
                f"{source_size}, deleting and copying again"
            )
            try:
                local_destination.unlink(missing_ok=True)
            except OSError as e:
                # Fails while an earlier run still has the image attached
                return unwritable("delete outdated copy", e)
            recopy = True

        if source_size is None:
            error = f"{remote_source} is not reachable"
            self.logger.error(f"MEDIA_UNREACHABLE: {error}")
            return state(
                StagingAction.FAILED,
                local_size=None,
                failure=StagingFailure.MEDIA_UNREACHABLE,
                error=error,
            )

        self.logger.info(
            f"Copying {remote_source} -> {local_destination} ({source_size} bytes)"
        )
        try:
            await self._copy(remote_source, local_destination, source_size)
        except (OSError, httpx.HTTPError) as e:
            self._discard(local_destination)
            error = f"copy from {remote_source} failed: {e}"
            self.logger.error(f"MEDIA_UNREACHABLE: {error}")
            return state(
                StagingAction.FAILED,
                local_size=None,
                failure=StagingFailure.MEDIA_UNREACHABLE,
                error=error,
            )

        copied_size = file_size(local_destination)
        if not verify_size(local_destination, source_size):
            self._discard(local_destination)
            return state(
                StagingAction.FAILED,
                local_size=copied_size,
                failure=StagingFailure.MEDIA_SIZE_MISMATCH,
                error=(
                    f"expected {source_size} bytes, "
                    f"copied {copied_size}"
                ),
            )

        self.logger.info(f"Media staged at {local_destination}")
        action = StagingAction.RECOPIED if recopy else StagingAction.COPIED_FRESH
        return state(action, local_size=copied_size)

    def _discard(self, path: Path) -> None:
        """Delete a partial or wrong-sized copy; the failure being reported wins."""
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            self.logger.warning(f"Failed to delete {path}: {e}")

    async def _probe_source(self, remote_source: str) -> Optional[int]:
        """Return the remote size in bytes, or None if it can't be reached."""
        if is_url(remote_source):
            try:
                async with httpx.AsyncClient(
                    timeout=self.http_timeout, follow_redirects=True
                ) as client:
                    response = await client.head(remote_source)
                    response.raise_for_status()
            except httpx.HTTPError as e:
                self.logger.warning(f"HEAD {remote_source} failed: {e}")
                return None

            length = response.headers.get("Content-Length")
            if length is None or not length.isdigit():
                self.logger.warning(f"{remote_source} did not report a Content-Length")
                return None
            return int(length)

        # Shares can take a long time to answer; keep the event loop free
        try:
            if not await aiofiles.os.path.isfile(remote_source):
                return None
            return (await aiofiles.os.stat(remote_source)).st_size
        except OSError as e:
            self.logger.warning(f"Cannot stat {remote_source}: {e}")
            return None

    async def _copy(self, remote_source: str, target_path: Path, source_size: int) -> None:
        """Copy the full source into target_path, logging progress every 10%."""
        copied = 0
        last_progress = 0

        def advance(count: int) -> None:
            nonlocal copied, last_progress
            copied += count
            progress = int(copied * 100 / source_size) if source_size else 100
            if progress >= last_progress + 10:
                last_progress = progress
                self.logger.info(f"Copy progress: {progress}% ({copied}/{source_size} bytes)")

        async with aiofiles.open(target_path, "wb") as dst:
            if is_url(remote_source):
                async with httpx.AsyncClient(
                    timeout=self.http_timeout, follow_redirects=True
                ) as client:
                    async with client.stream("GET", remote_source) as response:
                        response.raise_for_status()
                        async for chunk in response.aiter_bytes(chunk_size=self.chunk_size):
                            await dst.write(chunk)
                            advance(len(chunk))
            else:
                async with aiofiles.open(remote_source, "rb") as src:
                    while chunk := await src.read(self.chunk_size):
                        await dst.write(chunk)
                        advance(len(chunk))

        self.logger.debug(f"Copied {copied} bytes")
