"""
JuiceFS command-line wrapper.

Builds the format/mount/umount command lines for a volume and runs them as
blocking subprocesses with stdout and stderr captured separately.
"""

import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Union

from obsdisk.types import Credentials

logger = logging.getLogger(__name__)

_FATAL_RE = re.compile(r"<FATAL>:(.*)", re.DOTALL)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.exit_code == 0


CommandRunner = Callable[[List[str], Optional[float]], CommandResult]


def run_command(args: List[str], timeout: Optional[float] = None) -> CommandResult:
    """
    Run a command to completion.

    Timeouts and launch failures are reported as a non-zero result whose
    stderr describes the problem, the same way a failing tool would.
    """
    try:
        result = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        stdout = e.stdout or ""
        if isinstance(stdout, bytes):
            stdout = stdout.decode(errors="replace")
        return CommandResult(
            exit_code=-1,
            stdout=stdout,
            stderr=f"Command timed out after {timeout}s",
        )
    except OSError as e:
        return CommandResult(
            exit_code=-1,
            stderr=f"Error running command: {e}",
        )
    return CommandResult(
        exit_code=result.returncode,
        stdout=result.stdout,
        stderr=result.stderr,
    )


def extract_fatal_detail(stderr: str) -> str:
    """
    Reduce tool stderr to the part worth showing a user.

    If the text contains a ``<FATAL>:`` marker, everything after it (trimmed)
    is returned; otherwise the whole text is returned unchanged.
    """
    if not stderr:
        return ""
    match = _FATAL_RE.search(stderr)
    if match:
        return match.group(1).strip()
    return stderr


class JuiceFSTool:
    """
    Invokes the juicefs binary for one working directory.

    Each volume has a SQLite metadata database at ``<metas_dir>/<name>`` and
    a mount point at ``<vols_dir>/<name>``.
    """

    def __init__(
        self,
        metas_dir: Union[str, Path],
        vols_dir: Union[str, Path],
        binary: str = "juicefs",
        trash_days: int = 0,
        background: bool = True,
        timeout_sec: Optional[float] = None,
        runner: Optional[CommandRunner] = None,
    ):
        """
        Args:
            metas_dir: Directory of per-volume metadata databases
            vols_dir: Directory of mount points
            binary: juicefs executable
            trash_days: Trash retention for newly formatted volumes
            background: Mount as a daemon
            timeout_sec: Optional per-command timeout
            runner: Command runner, defaults to a blocking subprocess call
        """
        self.metas_dir = Path(metas_dir)
        self.vols_dir = Path(vols_dir)
        self.binary = binary
        self.trash_days = trash_days
        self.background = background
        self.timeout_sec = timeout_sec
        self._runner = runner or run_command

    def metadata_path(self, name: str) -> Path:
        return self.metas_dir / name

    def meta_url(self, name: str) -> str:
        return f"sqlite3://{self.metadata_path(name)}"

    def mount_point(self, name: str) -> Path:
        return self.vols_dir / name

    def _run(self, args: List[str], redacted: Optional[List[str]] = None) -> CommandResult:
        logger.debug(f"Running: {' '.join(redacted or args)}")
        result = self._runner(args, self.timeout_sec)
        if not result.success:
            logger.debug(f"Command exited with {result.exit_code}: {result.stderr.strip()}")
        return result

    def format(
        self,
        name: str,
        provider_type: str,
        credentials: Credentials,
        bucket: str,
    ) -> CommandResult:
        """Initialize a new volume against a bucket."""
        args = [
            self.binary,
            "format",
            "--trash-days", str(self.trash_days),
            "--access-key", credentials.access_key,
            "--secret-key", credentials.secret_key,
            "--bucket", bucket,
            "--storage", provider_type,
            self.meta_url(name),
            name,
        ]
        redacted = [("******" if arg == credentials.secret_key else arg) for arg in args]
        return self._run(args, redacted)

    def mount(self, name: str) -> CommandResult:
        args = [self.binary, "mount"]
        if self.background:
            args.append("-d")
        args += [self.meta_url(name), str(self.mount_point(name))]
        return self._run(args)

    def unmount(self, name: str) -> CommandResult:
        return self._run([self.binary, "umount", str(self.mount_point(name))])

    def remove_metadata(self, name: str) -> None:
        """
        Delete a volume's metadata database.

        A missing file is not an error.

        Raises:
            OSError: If the file exists but cannot be removed
        """
        self.metadata_path(name).unlink(missing_ok=True)
