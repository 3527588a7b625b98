"""
Tests for the command builder and recorded-name extraction.
"""

from pathlib import Path

import pytest

from brewkeeper.core.engine.commands import CommandBuilder, extract_package_name
from brewkeeper.core.engine.errors import MalformedRecordError
from brewkeeper.core.models.command import Operation
from brewkeeper.core.models.dependency import Category, Dependency

# ── Name extraction ──────────────────────────────────────────────────


class TestExtractPackageName:
    def test_middle_component(self):
        assert extract_package_name("group:foo:1.2.3") == "foo"

    @pytest.mark.parametrize(
        "identifier",
        ["foo", "group:foo", "group:foo:1.2:extra", "group::1.0", ""],
    )
    def test_malformed(self, identifier):
        with pytest.raises(MalformedRecordError) as exc:
            extract_package_name(identifier)
        assert exc.value.identifier == identifier


# ── Builder ──────────────────────────────────────────────────────────


class TestCommandBuilder:
    def test_binary_and_working_dir(self, builder: CommandBuilder):
        cmd = builder.update_self()
        assert cmd.binary == str(Path("/opt/homebrew/bin/brew"))
        assert cmd.working_dir == str(Path("/opt/homebrew"))

    def test_update_and_upgrade_are_category_agnostic(self, builder: CommandBuilder):
        for category in (None, Category.FORMULA, Category.CASK):
            assert builder.build(Operation.UPDATE_SELF, category).args == ("update",)
            assert builder.build(Operation.UPGRADE_ALL, category).args == ("upgrade",)
        assert builder.build(Operation.UPDATE_SELF, Category.CASK).category is None

    def test_formula_uninstall(self, builder: CommandBuilder):
        cmd = builder.uninstall("group:curl:8.0", Category.FORMULA)
        assert cmd.args == ("uninstall", "curl")
        assert cmd.package == "curl"

    def test_cask_uninstall(self, builder: CommandBuilder):
        cmd = builder.uninstall("group:firefox:120", Category.CASK)
        assert cmd.args == ("cask", "uninstall", "firefox")

    def test_formula_install(self, builder: CommandBuilder):
        dep = Dependency.parse("homebrew:wget:1.21", Category.FORMULA)
        assert builder.install(dep).args == ("install", "wget")

    def test_cask_install(self, builder: CommandBuilder):
        dep = Dependency.parse("firefox", Category.CASK)
        cmd = builder.install(dep)
        assert cmd.args == ("cask", "install", "firefox")
        assert cmd.category is Category.CASK

    def test_uninstall_malformed_record(self, builder: CommandBuilder):
        with pytest.raises(MalformedRecordError):
            builder.uninstall("curl", Category.FORMULA)

    def test_install_needs_package(self, builder: CommandBuilder):
        with pytest.raises(ValueError):
            builder.build(Operation.INSTALL, Category.FORMULA)

    def test_uninstall_needs_category(self, builder: CommandBuilder):
        with pytest.raises(ValueError):
            builder.build(Operation.UNINSTALL, None, "git")

    def test_every_command_shares_binary(self, builder: CommandBuilder):
        dep = Dependency.parse("git", Category.FORMULA)
        commands = [
            builder.update_self(),
            builder.upgrade_all(),
            builder.install(dep),
            builder.uninstall("g:git:1", Category.CASK),
        ]
        assert len({c.binary for c in commands}) == 1
        assert len({c.working_dir for c in commands}) == 1
