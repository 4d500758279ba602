"""Platform discovery for sw-collector.

Reads ``/etc/os-release`` once per run to learn which distribution the
endpoint runs and therefore which package manager wrote the transaction
log. Discovery is immutable once created.

Example:
    >>> env = detect_platform()
    >>> env.os_id
    'ubuntu'
    >>> env.os_string
    'Ubuntu_22.04-x86_64'
"""

from __future__ import annotations

import platform as _platform
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .logging_config import get_logger

logger = get_logger(__name__)

OS_RELEASE = Path("/etc/os-release")


@dataclass(frozen=True)
class Platform:
    """Immutable snapshot of host facts relevant to software collection.

    Attributes:
        os_id: ``ID`` from os-release, lower case (e.g. ``debian``)
        os_like: ``ID_LIKE`` entries, lower case
        name: Product name (``NAME``)
        version_id: Release (``VERSION_ID``), may be empty
        machine: Hardware architecture (``x86_64``, ``aarch64``...)
    """

    os_id: str
    name: str
    version_id: str = ""
    machine: str = ""
    os_like: tuple[str, ...] = field(default_factory=tuple)

    @property
    def os_string(self) -> str:
        """OS component of software identifiers: ``<name>_<version>-<machine>``."""
        product = self.name
        if self.version_id:
            product = f"{product} {self.version_id}"
        product = "_".join(product.split())
        if self.machine:
            return f"{product}-{self.machine}"
        return product

    def is_like(self, family: str) -> bool:
        return self.os_id == family or family in self.os_like


def parse_os_release(content: str) -> dict[str, str]:
    """Parse os-release ``KEY=value`` lines, honouring shell quoting."""
    values: dict[str, str] = {}
    for raw in content.splitlines():
        raw = raw.strip()
        if not raw or raw.startswith("#") or "=" not in raw:
            continue
        key, _, value = raw.partition("=")
        try:
            parts = shlex.split(value)
        except ValueError:
            logger.debug("Ignoring unparsable os-release line: %s", raw)
            continue
        values[key.strip()] = parts[0] if parts else ""
    return values


def detect_platform(
    os_release: Path = OS_RELEASE, machine: Optional[str] = None
) -> Platform:
    """Discover the host platform.

    A missing or unreadable os-release file yields a platform named after
    ``platform.system()`` with an empty ``os_id``, which no extractor
    claims unless one is configured explicitly.
    """
    machine = machine if machine is not None else _platform.machine()

    try:
        values = parse_os_release(os_release.read_text(encoding="utf-8"))
    except OSError as e:
        logger.warning("Cannot read %s: %s", os_release, e)
        return Platform(os_id="", name=_platform.system() or "unknown", machine=machine)

    platform = Platform(
        os_id=values.get("ID", "").lower(),
        name=values.get("NAME", values.get("ID", "unknown")),
        version_id=values.get("VERSION_ID", ""),
        machine=machine,
        os_like=tuple(v.lower() for v in values.get("ID_LIKE", "").split()),
    )
    logger.debug("Detected platform %s (%s)", platform.os_string, platform.os_id)
    return platform
