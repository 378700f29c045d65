"""Disassembler collaborators producing `luac -l` listings for source files."""

import os
import subprocess
from pathlib import Path
from typing import List, Optional, Protocol, Union


DEFAULT_LUAC = "luac"
DEFAULT_TIMEOUT = 30.0


class CompileError(Exception):
    """
    Raised when no instruction listing could be produced for a file.

    Attributes:
        path: The file that failed.
        output: Compiler messages, one per line.
    """

    def __init__(self, path: Union[str, Path], reason: str, output: Optional[List[str]] = None):
        super().__init__(reason)
        self.path = str(path)
        self.reason = reason
        self.output = list(output or [])


class Disassembler(Protocol):
    """Anything that can turn a Lua source file into a listing."""

    def disassemble(self, path: Path) -> str:
        """
        Return the instruction listing for `path`.

        Raises:
            CompileError: If the file does not exist or does not compile.
        """
        ...


class LuacDisassembler:
    """
    Runs `luac -l -p` on a file.

    Args:
        luac: The luac executable. Defaults to $LUAC, then "luac".
        timeout: Seconds to wait for a single invocation.
    """

    def __init__(self, luac: Optional[str] = None, timeout: Optional[float] = DEFAULT_TIMEOUT):
        self.luac = luac or os.environ.get("LUAC") or DEFAULT_LUAC
        self.timeout = timeout

    def command(self, path: Path) -> List[str]:
        return [self.luac, "-l", "-p", str(path)]

    def disassemble(self, path: Path) -> str:
        path = Path(path)
        if not path.is_file():
            raise CompileError(path, f"file {path} does not exist")

        try:
            proc = subprocess.run(
                self.command(path),
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise CompileError(path, f"file {path} timed out after {self.timeout}s")
        except OSError as e:
            raise CompileError(path, f"could not run {self.luac}: {e}")

        errors = [line for line in proc.stderr.splitlines() if line.strip()]
        if proc.returncode != 0 or errors or not proc.stdout.strip():
            raise CompileError(path, f"file {path} did not successfully parse", errors)

        return proc.stdout

    def __repr__(self) -> str:
        return f"LuacDisassembler(luac={self.luac!r}, timeout={self.timeout!r})"
