import asyncio
import os
from typing import Optional, Sequence
from urllib.parse import quote, urlsplit, urlunsplit
from pagefactory.core.errors import GitCommandError
from pagefactory.core.logging import get_logger, mask_credentials

logger = get_logger("git")


def authenticated_url(url: str, username: str, token: str) -> str:
    """Embed credentials into an https remote; local paths and other schemes pass through."""
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https"):
        return url
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    netloc = f"{quote(username, safe='')}:{quote(token, safe='')}@{host}"
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


class GitRunner:
    """Runs the git CLI without ever blocking on a credential prompt."""

    def __init__(self, timeout: float = 180.0):
        self.timeout = timeout
        self.env = {**os.environ, "GIT_TERMINAL_PROMPT": "0"}

    async def run(self, *args: str, cwd: Optional[str] = None) -> str:
        command = mask_credentials(" ".join(("git",) + args))
        logger.debug(f"$ {command} (cwd={cwd})")

        process = await asyncio.create_subprocess_exec(
            "git", *args,
            cwd=cwd,
            env=self.env,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise GitCommandError(command, None, stderr=f"timed out after {self.timeout}s")
        finally:
            # Also reached on cancellation, e.g. when an outer stage timeout fires
            if process.returncode is None:
                process.kill()
                await process.wait()

        out = mask_credentials(stdout.decode(errors="replace"))
        err = mask_credentials(stderr.decode(errors="replace"))
        if process.returncode != 0:
            raise GitCommandError(command, process.returncode, out, err)
        return out

    async def clone(self, url: str, target: str, branch: str) -> None:
        await self.run("clone", "--branch", branch, "--single-branch", url, target)

    async def init(self, repo_dir: str) -> None:
        await self.run("init", cwd=repo_dir)

    async def set_identity(self, repo_dir: str, name: str, email: str) -> None:
        await self.run("config", "user.name", name, cwd=repo_dir)
        await self.run("config", "user.email", email, cwd=repo_dir)

    async def add(self, repo_dir: str, paths: Sequence[str] = (".",)) -> None:
        await self.run("add", "--", *paths, cwd=repo_dir)

    async def use_branch(self, repo_dir: str, branch: str) -> None:
        # HEAD is still unborn right after init, so point it at the branch directly
        await self.run("symbolic-ref", "HEAD", f"refs/heads/{branch}", cwd=repo_dir)

    async def commit(self, repo_dir: str, message: str) -> None:
        await self.run("commit", "--no-gpg-sign", "-m", message, cwd=repo_dir)

    async def set_remote(self, repo_dir: str, name: str, url: str) -> None:
        remotes = (await self.run("remote", cwd=repo_dir)).split()
        if name in remotes:
            await self.run("remote", "set-url", name, url, cwd=repo_dir)
        else:
            await self.run("remote", "add", name, url, cwd=repo_dir)

    async def push(self, repo_dir: str, remote: str, branch: str) -> None:
        await self.run("push", "-u", remote, branch, cwd=repo_dir)
