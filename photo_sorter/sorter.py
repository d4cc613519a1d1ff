"""
Sync engine for Photo Sorter.

One pass lists the source folder, skips hidden files and anything that
is not a regular file, and copies every file whose name has not been
seen before into ``<target>/<YYYY>/<name>``, where YYYY is the local
year of the file's modification time.

A file is copied at most once, keyed on its name alone.  An existing
destination file is never overwritten.  Copy failures are logged and the
pass moves on; by default the failed name still counts as seen, so it is
not retried until it is removed from the seen cache.
"""

import logging
import os
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from photo_sorter.errors import SourceUnavailableError

logger = logging.getLogger(__name__)

_COPY_CHUNK = 256 * 1024  # 256 KiB read chunks
_DIR_MODE = 0o700

OUTCOME_COPIED = "copied"
OUTCOME_SKIPPED = "skipped"
OUTCOME_FAILED = "failed"


@dataclass(frozen=True)
class Candidate:
    """A regular, non-hidden file found in the source folder."""
    name: str
    modified: float

    @property
    def year(self) -> int:
        """Local calendar year of the modification time."""
        return datetime.fromtimestamp(self.modified).year


@dataclass
class CopyRecord:
    """Record of a single copy decision."""
    source: str
    destination: str = ""
    outcome: str = ""
    error: str = ""

    @property
    def copied(self) -> bool:
        return self.outcome == OUTCOME_COPIED

    @property
    def skipped(self) -> bool:
        return self.outcome == OUTCOME_SKIPPED

    @property
    def failed(self) -> bool:
        return self.outcome == OUTCOME_FAILED


def destination_for(target_root: Path, candidate: Candidate) -> Path:
    """Return ``target_root / YYYY / name`` for *candidate*."""
    return Path(target_root) / f"{candidate.year:04d}" / candidate.name


class PhotoSorter:
    """
    Copies unseen files from the source folder into year folders.

    Parameters
    ----------
    source_root : Path
        The folder being watched.  Only its immediate entries are scanned.
    target_root : Path
        The folder under which year folders are created.
    retry_failed : bool
        If True, names whose copy failed are left out of the returned seen
        set so the next pass tries them again.
    """

    def __init__(self, source_root: Path, target_root: Path, retry_failed: bool = False):
        self.source_root = Path(source_root)
        self.target_root = Path(target_root)
        self.retry_failed = retry_failed
        self.last_records: list[CopyRecord] = []

    def scan(self) -> list[Candidate]:
        """
        List the copy candidates currently in the source folder.

        Raises SourceUnavailableError if the folder itself cannot be listed.
        """
        try:
            with os.scandir(self.source_root) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            raise SourceUnavailableError(
                f"Cannot list source folder {self.source_root}: {exc}"
            ) from exc

        candidates = []
        for entry in entries:
            if entry.name.startswith("."):
                continue
            try:
                if not entry.is_file(follow_symlinks=False):
                    continue
                stat = entry.stat(follow_symlinks=False)
            except OSError as exc:
                logger.debug("Ignoring %s: %s", entry.path, exc)
                continue
            candidates.append(Candidate(entry.name, stat.st_mtime))
        return candidates

    def run(self, seen: set[str]) -> tuple[set[str], bool]:
        """
        Run one pass against *seen*.

        Returns the new seen set, built fresh from the current listing,
        and whether any file was newly processed.
        """
        logger.info("Starting sort...")
        records: list[CopyRecord] = []
        new_seen: set[str] = set()
        for candidate in self.scan():
            new_seen.add(candidate.name)
            if candidate.name in seen:
                continue
            rec = self._process(candidate)
            records.append(rec)
            if rec.failed and self.retry_failed:
                new_seen.discard(candidate.name)

        self.last_records = records
        if records:
            logger.info(
                "Sort complete (%d copied, %d skipped, %d failed)",
                sum(r.copied for r in records),
                sum(r.skipped for r in records),
                sum(r.failed for r in records),
            )
        else:
            logger.info("Sort complete (no changes)")
        return new_seen, bool(records)

    # ---- per-file copy ----

    def _process(self, candidate: Candidate) -> CopyRecord:
        source = self.source_root / candidate.name
        rec = CopyRecord(source=str(source))

        try:
            dest = destination_for(self.target_root, candidate)
        except (OverflowError, OSError, ValueError) as exc:
            return self._fail(rec, "Unusable modification time", exc)
        rec.destination = str(dest)

        if os.path.lexists(dest):
            return self._skip(rec)

        logger.info("Copying src: %s target: %s", source, dest)
        try:
            src_fh = open(source, "rb")
        except OSError as exc:
            return self._fail(rec, "Could not open source", exc)

        with src_fh:
            try:
                dest.parent.mkdir(mode=_DIR_MODE, parents=True, exist_ok=True)
            except OSError as exc:
                return self._fail(rec, "Could not create year folder", exc)
            try:
                dst_fh = open(dest, "xb")
            except FileExistsError:
                # Appeared since the existence check
                return self._skip(rec)
            except OSError as exc:
                return self._fail(rec, "Could not create destination", exc)

            try:
                with dst_fh:
                    shutil.copyfileobj(src_fh, dst_fh, _COPY_CHUNK)
            except OSError as exc:
                self._remove_partial(dest)
                return self._fail(rec, "Copy failed", exc)

        rec.outcome = OUTCOME_COPIED
        return rec

    @staticmethod
    def _skip(rec: CopyRecord) -> CopyRecord:
        logger.info(
            "Skipping because it exists, src: %s target: %s",
            rec.source, rec.destination,
        )
        rec.outcome = OUTCOME_SKIPPED
        return rec

    @staticmethod
    def _fail(rec: CopyRecord, what: str, exc: Exception) -> CopyRecord:
        rec.outcome = OUTCOME_FAILED
        rec.error = f"{what}: {exc}"
        logger.error("%s for %s: %s", what, rec.source, exc)
        return rec

    @staticmethod
    def _remove_partial(dest: Path) -> None:
        try:
            dest.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove partial copy %s: %s", dest, exc)
