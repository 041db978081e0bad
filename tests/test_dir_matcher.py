"""Tests for host to guest directory matching."""

from __future__ import annotations

from avsh.core.dir_matcher import DirectoryMatcher
from avsh.core.parsed_config import ParsedConfig


class TestDirectoryMatcher:
    """Tests for DirectoryMatcher.match."""

    def test_project_root(self, single_machine_config: ParsedConfig) -> None:
        """Test that the project dir maps to /vagrant."""
        matcher = DirectoryMatcher(single_machine_config)
        assert matcher.match("/home/me/project") == ("default", "/vagrant")

    def test_nested_directory(self, single_machine_config: ParsedConfig) -> None:
        """Test that subdirectories keep their relative path."""
        matcher = DirectoryMatcher(single_machine_config)
        assert matcher.match("/home/me/project/src/lib/") == ("default", "/vagrant/src/lib")

    def test_primary_machine_tried_first(self, multi_machine_config: ParsedConfig) -> None:
        """Test that the primary machine wins when several cover a directory."""
        matcher = DirectoryMatcher(multi_machine_config)
        assert matcher.match("/home/me/project/web/src") == ("db", "/vagrant/web/src")

    def test_first_covering_machine(self, multi_machine_config: ParsedConfig) -> None:
        """Test that later machines are tried when earlier ones don't match."""
        matcher = DirectoryMatcher(multi_machine_config)
        assert matcher.match("/home/me/shared/docs") == ("web1", "/shared/docs")

    def test_restricted_to_machine(self, multi_machine_config: ParsedConfig) -> None:
        """Test matching within one machine's folders."""
        matcher = DirectoryMatcher(multi_machine_config)

        assert matcher.match("/home/me/project", machine="web2") == ("web2", "/code")
        assert matcher.match("/home/me/project/web", machine="web1") == (
            "web1",
            "/vagrant/web",
        )

    def test_no_match(self, multi_machine_config: ParsedConfig) -> None:
        """Test that an uncovered directory falls back to the primary machine."""
        matcher = DirectoryMatcher(multi_machine_config)

        assert matcher.match("/etc") == ("db", None)
        assert matcher.match("/etc", machine="web2") == ("web2", None)

    def test_no_match_without_primary(self) -> None:
        """Test that the first machine is the fallback when there is no primary."""
        config = ParsedConfig("/home/me/project", {}, {"web": {}, "db": {}})
        matcher = DirectoryMatcher(config)

        assert matcher.match("/etc") == ("web", None)

    def test_sibling_prefix_not_matched(self, multi_machine_config: ParsedConfig) -> None:
        """Test that a directory sharing only a name prefix doesn't match."""
        matcher = DirectoryMatcher(multi_machine_config)
        assert matcher.match("/home/me/projectile") == ("db", None)

    def test_no_machines_declared(self, single_machine_config: ParsedConfig) -> None:
        """Test the fallback machine of a bare project."""
        matcher = DirectoryMatcher(single_machine_config)
        assert matcher.match("/tmp") == ("default", None)
