"""
First-run setup: make sure the PDF library is importable.

The merge itself never calls into this module. The CLI runs ``ensure_codec``
before it imports ``interleave_pdf.pdf``, and the yes/no prompt is passed in
so nothing here talks to the terminal directly.
"""
from __future__ import annotations

import importlib.util
import shlex
import subprocess
import sys
from typing import Callable, Optional

import httpx
import structlog

from .errors import DependencyUnavailableError

log = structlog.get_logger("interleave_pdf")

CODEC_MODULE = "PyPDF2"
CODEC_DISTRIBUTION = "PyPDF2"
PYPI_JSON_URL = "https://pypi.org/pypi/{name}/json"


def codec_available() -> bool:
    return importlib.util.find_spec(CODEC_MODULE) is not None


def resolve_latest_version(client: httpx.Client, name: str = CODEC_DISTRIBUTION) -> str:
    r = client.get(PYPI_JSON_URL.format(name=name))
    r.raise_for_status()
    return r.json()["info"]["version"]


def install_codec(version: str, *, python: Optional[str] = None, timeout: int = 300) -> None:
    cmd = [python or sys.executable, "-m", "pip", "install", f"{CODEC_DISTRIBUTION}=={version}"]
    log.info("codec_install_start", cmd=shlex.join(cmd))
    p = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True, timeout=timeout)
    if p.returncode != 0:
        raise DependencyUnavailableError(f"pip failed: {shlex.join(cmd)} :: {p.stderr.strip()}")
    log.info("codec_install_done", version=version)


def ensure_codec(
    confirm: Callable[[str], bool],
    *,
    client: Optional[httpx.Client] = None,
    installer: Callable[[str], None] = install_codec,
) -> None:
    """
    Install PyPDF2 from PyPI if it cannot be imported.

    Asks before touching the network. One attempt only: a declined prompt,
    a registry error or a failed pip run all raise DependencyUnavailableError.
    """
    if codec_available():
        return
    log.warning("codec_missing", module=CODEC_MODULE)

    if not confirm(f"{CODEC_DISTRIBUTION} is not installed. Install the latest {CODEC_DISTRIBUTION} from PyPI now?"):
        raise DependencyUnavailableError(f"{CODEC_DISTRIBUTION} is required; installation declined")

    owns_client = client is None
    cli = client or httpx.Client(timeout=30)
    try:
        version = resolve_latest_version(cli)
    except (httpx.HTTPError, KeyError, ValueError) as e:
        raise DependencyUnavailableError(f"could not resolve {CODEC_DISTRIBUTION} on PyPI: {e}") from e
    finally:
        if owns_client:
            cli.close()

    try:
        installer(version)
    except (OSError, subprocess.SubprocessError) as e:
        raise DependencyUnavailableError(f"could not install {CODEC_DISTRIBUTION}: {e}") from e

    importlib.invalidate_caches()
    if not codec_available():
        raise DependencyUnavailableError(f"{CODEC_DISTRIBUTION} still not importable after install")
