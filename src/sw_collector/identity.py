"""Stable software identifiers for inventory items.

An identifier names one version of one package on one platform, so the
same package version always maps to the same inventory row across runs:

    <tag_creator>__<os_string>-<package>-<version>

e.g. ``sw-collector.org__Ubuntu_22.04-x86_64-libssl3-3.0.2-0ubuntu1.10``.
Colons (Debian version epochs) are replaced by ``~`` so identifiers stay
usable as file names and URI segments.
"""

from dataclasses import dataclass


def _sanitize(value: str) -> str:
    return value.replace(":", "~")


@dataclass(frozen=True)
class SoftwareIdentity:
    tag_creator: str
    os_string: str

    def sw_id(self, package: str, version: str) -> str:
        prefix = f"{self.tag_creator}__{self.os_string}-{package}"
        if version:
            return _sanitize(f"{prefix}-{version}")
        return _sanitize(prefix)
