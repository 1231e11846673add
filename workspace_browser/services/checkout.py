"""
Checkout - Projects a snapshot's tree into a private scratch directory.

Each query gets its own directory under the scratch root:

    <scratch_root>/
        workspace-9f86d081884c7d659a2feaa0c55ad015/   <- one query
        workspace-2c26b46b68ffc68ff99b453c1d304134/   <- another

Directory names carry 128 random bits from ``secrets``, so concurrent
queries never collide. The directory is removed when the ``with`` block
around it exits, whichever way it exits.

Only the scratch directory is written. The repository is read through
its object store and never touched.
"""

import logging
import os
import secrets
import shutil
import stat
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from dulwich.objects import S_ISGITLINK, Blob, Tree

from workspace_browser.errors import StorageError
from workspace_browser.services.repository import RepositoryHandle
from workspace_browser.services.resolver import ResolvedSnapshot

logger = logging.getLogger(__name__)

SCRATCH_PREFIX = "workspace-"

# Names git itself refuses to check out
_UNSAFE_NAMES = {b"", b".", b"..", b".git"}


@contextmanager
def scratch_directory(scratch_root: Path) -> Iterator[Path]:
    """
    Allocate a uniquely named directory and delete it afterwards.

    Usage:
        with scratch_directory(settings.scratch_path) as workdir:
            materialize(repo, snapshot, workdir)
            ...
        # workdir is gone here, even after an exception

    Raises:
        StorageError: If the directory cannot be created
    """
    try:
        scratch_root.mkdir(parents=True, exist_ok=True)
        workdir = scratch_root / f"{SCRATCH_PREFIX}{secrets.token_hex(16)}"
        workdir.mkdir(mode=0o700)
    except OSError as e:
        raise StorageError(f"Cannot create scratch directory: {e}")

    logger.debug("Allocated scratch directory %s", workdir)
    try:
        yield workdir
    finally:
        shutil.rmtree(workdir, ignore_errors=True)
        logger.debug("Released scratch directory %s", workdir)


def _is_safe_name(name: bytes) -> bool:
    return (
        name.lower() not in _UNSAFE_NAMES
        and b"/" not in name
        and b"\\" not in name
        and b"\x00" not in name
    )


class CheckoutMaterializer:
    """
    Writes every file of a snapshot into a target directory.

    Usage:
        materializer = CheckoutMaterializer(repo)
        materializer.materialize(snapshot, workdir)

    Symbolic links are written as regular files holding the link target,
    the way git does with core.symlinks=false. A link can therefore never
    lead a later read outside the checkout. Submodules become empty
    directories because their content lives in another repository.
    """

    def __init__(self, repo: RepositoryHandle):
        self.repo = repo

    def materialize(self, snapshot: ResolvedSnapshot, target: Path) -> Path:
        """
        Project ``snapshot`` into ``target``.

        Args:
            snapshot: The resolved commit and tree
            target: An existing, empty scratch directory

        Returns:
            The target directory

        Raises:
            StorageError: If objects are missing or the filesystem fails
        """
        try:
            count = self._write_tree(snapshot.tree_id.encode("ascii"), target)
        except KeyError as e:
            raise StorageError(
                f"Object {e} of commit {snapshot.commit_id} is missing "
                f"from workspace '{self.repo.name}'",
                workspace=str(self.repo.name),
                revision=snapshot.revision,
            )
        except OSError as e:
            raise StorageError(
                f"Cannot check out commit {snapshot.commit_id}: {e}",
                workspace=str(self.repo.name),
                revision=snapshot.revision,
            )

        logger.info(
            "Checked out %d files of %s@%s into %s",
            count,
            self.repo.name,
            snapshot.commit_id[:12],
            target,
        )
        return target

    def _write_tree(self, tree_id: bytes, directory: Path) -> int:
        tree = self.repo.get_object(tree_id)
        if not isinstance(tree, Tree):
            raise StorageError(f"Object {tree_id.decode('ascii')} is not a tree")

        directory.mkdir(parents=True, exist_ok=True)
        count = 0

        for entry in tree.iteritems():
            if not _is_safe_name(entry.path):
                logger.warning(
                    "Skipping unsafe tree entry %r in workspace %s",
                    entry.path,
                    self.repo.name,
                )
                continue

            destination = directory / os.fsdecode(entry.path)

            if stat.S_ISDIR(entry.mode):
                count += self._write_tree(entry.sha, destination)
            elif S_ISGITLINK(entry.mode):
                destination.mkdir(exist_ok=True)
            else:
                self._write_blob(entry.sha, entry.mode, destination)
                count += 1

        return count

    def _write_blob(self, blob_id: bytes, mode: int, destination: Path) -> None:
        blob = self.repo.get_object(blob_id)
        if not isinstance(blob, Blob):
            raise StorageError(f"Object {blob_id.decode('ascii')} is not a blob")

        destination.write_bytes(blob.as_raw_string())
        if not stat.S_ISLNK(mode) and mode & 0o111:
            destination.chmod(0o755)
