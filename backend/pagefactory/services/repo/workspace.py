import os
import shutil
from contextlib import asynccontextmanager
from typing import AsyncIterator
from pagefactory.core.logging import get_logger

logger = get_logger("workspace")


def workspace_path(root: str, job_id: str) -> str:
    return os.path.join(root, job_id)


def remove_tree(path: str) -> None:
    """Best-effort removal; a leftover directory is logged, never raised."""
    if not os.path.exists(path):
        return
    try:
        shutil.rmtree(path)
        logger.info(f"Cleaned up temporary directory: {path}")
    except OSError as e:
        logger.error(f"Failed to clean up temp dir {path}: {e}")


@asynccontextmanager
async def job_workspace(root: str, job_id: str) -> AsyncIterator[str]:
    """
    Exclusive scratch directory for one job. Anything left behind by a
    crashed earlier attempt is wiped first, and the directory is removed
    on every exit path.
    """
    path = workspace_path(root, job_id)
    if os.path.exists(path):
        logger.warning(f"[{job_id}] Removing stale working directory {path}")
        shutil.rmtree(path)
    os.makedirs(path)
    try:
        yield path
    finally:
        remove_tree(path)
