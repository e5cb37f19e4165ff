"""Tests for the package map and resolver."""

import pytest

from dotfiles_installer.errors import BadConstraint, NeedsDistroMapping, NoMapping, ResolveError
from dotfiles_installer.packagemap import (
    ByDistroName,
    LiteralName,
    ManagerEntry,
    PackageMap,
    dump_package_map,
    load_package_map,
)
from dotfiles_installer.resolver import Resolver, parse_constraint

MAP_DATA = {
    "packages": {
        "gpg": {
            "apt": {"name": "gnupg2"},
            "brew": {"name": "gnupg"},
            "dnf": {"name": "gnupg2"},
        },
        "development-tools": {
            "dnf": {"type": "group", "name": {"fedora": "Development Tools", "centos": "Development Tools"}},
            "apt": {"name": {"debian": "build-essential"}},
        },
        "empty": {"apt": {"name": ""}},
    }
}


@pytest.fixture
def package_map():
    return PackageMap.from_dict(MAP_DATA)


class TestPackageMap:
    """Tests for loading and serializing the package map."""

    def test_literal_and_distro_names(self, package_map):
        assert package_map.get("gpg")["brew"].name == LiteralName("gnupg")
        entry = package_map.get("development-tools")["dnf"]
        assert isinstance(entry.name, ByDistroName)
        assert entry.type == "group"
        assert entry.name.for_distro("fedora") == "Development Tools"
        assert entry.name.for_distro("ubuntu") is None

    def test_round_trip(self, package_map):
        assert PackageMap.from_dict(package_map.to_dict()) == package_map

    def test_load_from_file_round_trip(self, package_map, tmp_path):
        path = tmp_path / "map.yaml"
        path.write_text(dump_package_map(package_map))
        assert load_package_map(path) == package_map

    def test_embedded_map_loads(self):
        embedded = load_package_map()
        assert embedded.get("gpg")["apt"].name == LiteralName("gnupg2")
        assert embedded.get("chezmoi") is not None

    def test_malformed_entry(self):
        with pytest.raises(ValueError):
            ManagerEntry.from_dict("gnupg")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("packages: [unterminated")
        with pytest.raises(ValueError):
            load_package_map(path)


class TestResolver:
    """Tests for Resolver.resolve."""

    def test_resolves_literal_name(self, package_map):
        request = Resolver(package_map, "apt", "ubuntu").resolve("gpg")
        assert request.name == "gnupg2"
        assert request.type == ""
        assert request.version_constraint is None

    def test_resolves_distro_name_with_type(self, package_map):
        request = Resolver(package_map, "dnf", "fedora").resolve("development-tools")
        assert request.name == "Development Tools"
        assert request.type == "group"

    def test_unknown_code(self, package_map):
        with pytest.raises(NoMapping) as exc_info:
            Resolver(package_map, "apt", "ubuntu").resolve("nonexistent")
        assert "nonexistent" in str(exc_info.value)

    def test_no_entry_for_manager(self, package_map):
        with pytest.raises(NoMapping) as exc_info:
            Resolver(package_map, "brew", "").resolve("development-tools")
        assert "brew" in str(exc_info.value)

    def test_missing_distro_mapping(self, package_map):
        with pytest.raises(NeedsDistroMapping) as exc_info:
            Resolver(package_map, "apt", "ubuntu").resolve("development-tools")
        assert "ubuntu" in str(exc_info.value)

    def test_empty_literal_name(self, package_map):
        with pytest.raises(NoMapping):
            Resolver(package_map, "apt", "ubuntu").resolve("empty")

    def test_empty_code(self, package_map):
        with pytest.raises(ResolveError, match="cannot be empty"):
            Resolver(package_map, "apt", "ubuntu").resolve("")

    def test_constraint_is_parsed(self, package_map):
        request = Resolver(package_map, "brew", "").resolve("gpg", ">=2.2.0")
        assert request.constraint_text == ">=2.2.0"
        assert request.version_constraint is not None

    def test_bad_constraint(self, package_map):
        with pytest.raises(BadConstraint) as exc_info:
            Resolver(package_map, "brew", "").resolve("gpg", ">=not-a-version")
        assert "gpg" in str(exc_info.value)

    def test_every_defined_entry_resolves_to_a_name(self, package_map):
        for code, managers in package_map.packages.items():
            for manager, entry in managers.items():
                distros = list(entry.name.names) if isinstance(entry.name, ByDistroName) else [""]
                for distro in distros:
                    if isinstance(entry.name, LiteralName) and not entry.name.value:
                        continue
                    assert Resolver(package_map, manager, distro).resolve(code).name

    def test_resolve_is_repeatable(self, package_map):
        resolver = Resolver(package_map, "dnf", "fedora")
        before = package_map.to_dict()
        first = resolver.resolve("development-tools", ">=1.0")
        second = resolver.resolve("development-tools", ">=1.0")
        assert first == second
        assert package_map.to_dict() == before


class TestParseConstraint:
    """Tests for semver range parsing."""

    @pytest.mark.parametrize(
        "text,inside,outside",
        [
            (">=2.2.0", "2.4.3", "2.1.9"),
            (">=1.0, <2.0", "1.5.0", "2.0.0"),
            ("^1.4", "1.9.0", "2.0.0"),
            ("1.x || >=3", "3.1.0", "2.0.0"),
        ],
    )
    def test_ranges(self, text, inside, outside):
        import semantic_version as sv

        spec = parse_constraint(text)
        assert sv.Version(inside) in spec
        assert sv.Version(outside) not in spec

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_constraint("~>banana")
