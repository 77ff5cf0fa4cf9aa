"""External tool invocation. ToolRunner is the only place that spawns processes.

Tests substitute a fake runner with the same ``run`` signature.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

from nostr_bindings_tooling.errors import PipelineError

log = logging.getLogger(__name__)


class ToolRunner:
    """Run a command to completion and hand back the CompletedProcess (never raises on exit code).

    env, when given, is the complete child environment (see BuildContext.tool_env).
    """

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        capture: bool = False,
    ) -> subprocess.CompletedProcess:
        full_env = dict(env) if env is not None else None
        log.debug("$ %s (cwd=%s)", shlex.join(cmd), cwd or ".")
        return subprocess.run(
            list(cmd),
            cwd=str(cwd) if cwd is not None else None,
            env=full_env,
            capture_output=capture,
            text=True,
        )


def run_tool(
    runner: ToolRunner,
    cmd: Sequence[str],
    error_cls: type[PipelineError],
    what: str,
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    capture: bool = False,
) -> subprocess.CompletedProcess:
    """Run cmd; raise error_cls carrying the tool's exit code when it fails."""
    try:
        r = runner.run(cmd, cwd=cwd, env=env, capture=capture)
    except FileNotFoundError as e:
        msg = f"{what}: {cmd[0]} not found ({e})"
        raise error_cls(msg, exit_code=127) from e
    if r.returncode != 0:
        detail = (r.stderr or r.stdout or "").strip() if capture else ""
        msg = f"{what} failed (exit {r.returncode}): {shlex.join(cmd)}"
        if detail:
            msg = f"{msg}\n{detail}"
        raise error_cls(msg, exit_code=r.returncode)
    return r
