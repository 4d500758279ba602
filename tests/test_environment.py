"""Tests for environment.py - platform discovery."""

from sw_collector.environment import Platform, detect_platform, parse_os_release

UBUNTU_OS_RELEASE = """\
PRETTY_NAME="Ubuntu 22.04.4 LTS"
NAME="Ubuntu"
VERSION_ID="22.04"
VERSION="22.04.4 LTS (Jammy Jellyfish)"
ID=ubuntu
ID_LIKE=debian
# comment
HOME_URL="https://www.ubuntu.com/"
"""


class TestParseOsRelease:

    def test_quoted_and_bare_values(self):
        values = parse_os_release(UBUNTU_OS_RELEASE)
        assert values["NAME"] == "Ubuntu"
        assert values["ID"] == "ubuntu"
        assert values["VERSION"] == "22.04.4 LTS (Jammy Jellyfish)"
        assert "# comment" not in values

    def test_empty_value(self):
        assert parse_os_release("VARIANT=\n") == {"VARIANT": ""}

    def test_unbalanced_quote_skipped(self):
        assert parse_os_release('NAME="Broken\nID=debian\n') == {"ID": "debian"}


class TestDetectPlatform:

    def test_ubuntu(self, tmp_path):
        os_release = tmp_path / "os-release"
        os_release.write_text(UBUNTU_OS_RELEASE)

        platform = detect_platform(os_release, machine="x86_64")

        assert platform == Platform(
            os_id="ubuntu", name="Ubuntu", version_id="22.04", machine="x86_64", os_like=("debian",)
        )
        assert platform.os_string == "Ubuntu_22.04-x86_64"
        assert platform.is_like("debian")
        assert platform.is_like("ubuntu")
        assert not platform.is_like("fedora")

    def test_multi_word_name(self, tmp_path):
        os_release = tmp_path / "os-release"
        os_release.write_text('NAME="Debian GNU/Linux"\nVERSION_ID="12"\nID=debian\n')

        platform = detect_platform(os_release, machine="aarch64")

        assert platform.os_string == "Debian_GNU/Linux_12-aarch64"
        assert platform.os_like == ()

    def test_missing_file(self, tmp_path):
        platform = detect_platform(tmp_path / "missing", machine="x86_64")

        assert platform.os_id == ""
        assert platform.machine == "x86_64"

    def test_os_string_without_version_or_machine(self):
        assert Platform(os_id="arch", name="Arch Linux").os_string == "Arch_Linux"
