"""Extractor for the apt/dpkg transaction log (``/var/log/apt/history.log``).

A transaction in the log looks like::

    Start-Date: 2024-03-04  10:15:02
    Commandline: apt-get install -y curl
    Install: libcurl4:amd64 (7.81.0-1ubuntu1.15, automatic), curl:amd64 (7.81.0-1ubuntu1.15)
    Upgrade: libssl3:amd64 (3.0.2-0ubuntu1.12, 3.0.2-0ubuntu1.14)
    End-Date: 2024-03-04  10:15:05
"""

from __future__ import annotations

import re
import subprocess
from datetime import datetime, timezone
from typing import Optional

from ..exceptions import PackagePayloadError, TimestampError
from ..logging_config import get_logger
from .extractor import HistoryExtractor, ParsedPackage, register_extractor
from .models import Operation

logger = get_logger(__name__)

# name[:arch] (version[, version|automatic]) followed by a comma or the end
_GROUP_RE = re.compile(r"\s*(?P<name>[^\s(),]+)\s*\((?P<versions>[^()]*)\)\s*(?:,|$)")


def format_timestamp(moment: datetime) -> str:
    """Render a UTC datetime as the fixed-width ``YYYY-MM-DDTHH:MM:SSZ``.

    Every field is zero padded so that string order is time order.
    """
    return (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}Z"
    )


@register_extractor
class DpkgHistoryExtractor(HistoryExtractor):
    """apt history log of Debian and its derivatives."""

    name = "dpkg"
    families = ("debian", "ubuntu")
    start_marker = "Start-Date"
    end_marker = "End-Date"
    operations = {
        "Install": Operation.INSTALL,
        "Reinstall": Operation.INSTALL,
        "Upgrade": Operation.UPGRADE,
        "Downgrade": Operation.UPGRADE,
        "Remove": Operation.REMOVE,
        "Purge": Operation.REMOVE,
    }

    QUERY_COMMAND = [
        "dpkg-query",
        "--show",
        "--showformat=${Package}\t${Version}\t${Status}\n",
    ]
    QUERY_TIMEOUT = 60

    def extract_timestamp(self, remainder: str) -> str:
        text = " ".join(remainder.split())
        try:
            wall_clock = datetime.strptime(text, "%Y-%m-%d %H:%M:%S")
        except ValueError as e:
            raise TimestampError(remainder, str(e))

        if self.timezone is None:
            aware = wall_clock.astimezone()
        else:
            aware = wall_clock.replace(tzinfo=self.timezone)
        return format_timestamp(aware.astimezone(timezone.utc))

    def parse_packages(self, remainder: str, operation: Operation) -> list[ParsedPackage]:
        text = remainder.strip()
        if not text:
            raise PackagePayloadError(remainder, "no packages listed")

        packages: list[ParsedPackage] = []
        pos = 0
        while pos < len(text):
            match = _GROUP_RE.match(text, pos)
            if match is None:
                raise PackagePayloadError(remainder, f"unexpected text at offset {pos}")
            packages.append(self._parse_group(remainder, match, operation))
            pos = match.end()
        return packages

    def _parse_group(
        self, remainder: str, match: re.Match, operation: Operation
    ) -> ParsedPackage:
        package = match["name"].split(":", 1)[0]
        versions = [v.strip() for v in match["versions"].split(",")]
        if not package:
            raise PackagePayloadError(remainder, f"empty package name in '{match[0].strip()}'")

        if operation is Operation.UPGRADE:
            if len(versions) < 2 or not versions[0] or not versions[1]:
                raise PackagePayloadError(
                    remainder, f"expected '(old, new)' versions for {package}"
                )
            return package, versions[1], versions[0]

        if not versions[0]:
            raise PackagePayloadError(remainder, f"missing version for {package}")
        return package, versions[0], None

    def installed_packages(self) -> Optional[list[tuple[str, str]]]:
        try:
            result = subprocess.run(
                self.QUERY_COMMAND,
                capture_output=True,
                text=True,
                timeout=self.QUERY_TIMEOUT,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired) as e:
            logger.warning("dpkg-query unavailable, skipping installed package merge: %s", e)
            return None

        if result.returncode != 0:
            logger.warning("dpkg-query failed: %s", result.stderr.strip())
            return None

        return parse_dpkg_query(result.stdout)


def parse_dpkg_query(output: str) -> list[tuple[str, str]]:
    """Keep (package, version) of lines whose status is ``install ok installed``."""
    installed = []
    for line in output.splitlines():
        fields = line.split("\t")
        if len(fields) != 3:
            continue
        package, version, status = fields
        if status.strip() == "install ok installed" and package and version:
            installed.append((package, version))
    return installed
