"""Tests for the built-in subsystem adapters against a fake host."""

import json
from unittest.mock import patch

import pytest

from bkt.command_runner import CommandOutput
from bkt.exceptions import ScanError
from bkt.manifest import FlatpakApp, FlatpakScope, Shim
from bkt.plan import Verb
from bkt.subsystems.extension import ExtensionSubsystem
from bkt.subsystems.flatpak import FlatpakSubsystem, parse_flatpak_list
from bkt.subsystems.gsetting import GSettingSubsystem
from bkt.subsystems.homebrew import HomebrewSubsystem
from bkt.subsystems.shim import ShimSubsystem, parse_shim, render_shim
from bkt.subsystems.system import SystemSubsystem, parse_requested_packages
from tests.fixtures.host import InstalledFlatpak
from tests.fixtures.manifests import read_manifest, write_manifest


def _ops(plan):
    return [(op.verb, op.target) for op in plan.describe().operations]


class TestFlatpak:
    """Tests for the flatpak subsystem."""

    def test_parse_list(self):
        """Tab-separated columns map onto FlatpakApp."""
        apps = parse_flatpak_list("org.gnome.Boxes\tflathub\tuser\tstable\n\n")
        assert apps == [FlatpakApp("org.gnome.Boxes", "flathub", FlatpakScope.USER, "stable")]

    def test_sync_installs_and_updates(self, host, plan_ctx, user_dir):
        """Missing apps are installed, apps in the wrong scope are reinstalled."""
        host.flatpaks["org.gnome.Boxes"] = InstalledFlatpak("flathub", "system")
        host.flatpaks["org.example.Extra"] = InstalledFlatpak("flathub", "system")
        write_manifest(
            user_dir,
            "flatpak-apps.yaml",
            {
                "apps": [
                    {"id": "org.gnome.Boxes", "remote": "flathub", "scope": "user"},
                    "org.mozilla.firefox",
                ]
            },
        )

        plan = FlatpakSubsystem().sync(plan_ctx).plan(plan_ctx)

        assert _ops(plan) == [
            (Verb.INSTALL, "flatpak:org.mozilla.firefox"),
            (Verb.UPDATE, "flatpak:org.gnome.Boxes"),
        ]

    def test_sync_executes_commands(self, host, plan_ctx, exec_ctx, user_dir):
        """Executing the plan reaches the desired state."""
        write_manifest(user_dir, "flatpak-apps.yaml", {"apps": ["org.mozilla.firefox"]})

        report = FlatpakSubsystem().sync(plan_ctx).plan(plan_ctx).execute(exec_ctx)

        assert report.all_succeeded()
        assert "org.mozilla.firefox" in host.flatpaks
        assert "flatpak install -y --noninteractive --system flathub org.mozilla.firefox" in host.calls

    def test_pinned_commit_converges(self, host, plan_ctx, exec_ctx, user_dir):
        """A pinned commit is applied on install and does not cause drift afterwards."""
        write_manifest(
            user_dir,
            "flatpak-apps.yaml",
            {"apps": [{"id": "org.gnome.Boxes", "commit": "abcdef0123456789"}]},
        )

        report = FlatpakSubsystem().sync(plan_ctx).plan(plan_ctx).execute(exec_ctx)

        assert report.all_succeeded()
        assert host.flatpaks["org.gnome.Boxes"].commit == "abcdef0123456789"
        assert (
            "flatpak update -y --noninteractive --system --commit=abcdef0123456789 "
            "org.gnome.Boxes" in host.calls
        )
        assert FlatpakSubsystem().sync(plan_ctx).plan(plan_ctx).is_empty()

    def test_missing_flatpak_is_treated_as_empty(self, host, plan_ctx):
        """A machine without flatpak has no apps."""
        host.missing.add("flatpak")

        component = FlatpakSubsystem().component(plan_ctx)

        assert component.scan_system() == []

    def test_failing_list_is_a_scan_error(self, host, plan_ctx):
        """A non-zero exit while listing aborts planning."""
        host.failures["flatpak list"] = "system bus unavailable"

        with pytest.raises(ScanError, match="system bus unavailable"):
            FlatpakSubsystem().sync(plan_ctx).plan(plan_ctx)

    def test_capture_writes_user_manifest(self, host, plan_ctx, exec_ctx, user_dir):
        """Untracked apps are captured into the user layer."""
        host.flatpaks["org.gnome.Boxes"] = InstalledFlatpak("flathub", "user", "stable")

        plan = FlatpakSubsystem().capture(plan_ctx).plan(plan_ctx)
        assert _ops(plan) == [(Verb.CAPTURE, "flatpak:org.gnome.Boxes")]

        plan.execute(exec_ctx)

        assert read_manifest(user_dir / "flatpak-apps.yaml") == {
            "apps": [
                {"id": "org.gnome.Boxes", "remote": "flathub", "scope": "user", "branch": "stable"}
            ]
        }


class TestExtension:
    """Tests for the GNOME extensions subsystem."""

    def test_install_enable_disable(self, host, plan_ctx, exec_ctx, user_dir):
        """Missing extensions are installed; wrong state is toggled."""
        host.extensions = {"on@x": False, "off@x": True}
        write_manifest(
            user_dir,
            "gnome-extensions.yaml",
            {"extensions": ["on@x", {"uuid": "off@x", "enabled": False}, "new@x"]},
        )

        plan = ExtensionSubsystem().sync(plan_ctx).plan(plan_ctx)

        assert _ops(plan) == [
            (Verb.INSTALL, "extension:new@x"),
            (Verb.DISABLE, "extension:off@x"),
            (Verb.ENABLE, "extension:on@x"),
        ]

        report = plan.execute(exec_ctx)

        assert report.all_succeeded()
        assert host.extensions == {"on@x": True, "off@x": False, "new@x": True}

    def test_capture_records_disabled_state(self, host, plan_ctx, exec_ctx, user_dir):
        """Captured disabled extensions keep enabled: false."""
        host.extensions = {"a@x": True, "b@x": False}

        ExtensionSubsystem().capture(plan_ctx).plan(plan_ctx).execute(exec_ctx)

        assert read_manifest(user_dir / "gnome-extensions.yaml") == {
            "extensions": ["a@x", {"uuid": "b@x", "enabled": False}]
        }


class TestGSetting:
    """Tests for the gsettings subsystem."""

    def test_set_differing_values(self, host, plan_ctx, exec_ctx, system_dir):
        """Keys with a different value are set; missing schemas warn."""
        host.gsettings[("org.gnome.desktop.interface", "color-scheme")] = "'default'"
        host.gsettings[("org.gnome.desktop.interface", "clock-format")] = "'24h'"
        write_manifest(
            system_dir,
            "gsettings.yaml",
            {
                "settings": [
                    {"schema": "org.gnome.desktop.interface", "key": "color-scheme", "value": "'prefer-dark'"},
                    {"schema": "org.gnome.desktop.interface", "key": "clock-format", "value": "'24h'"},
                    {"schema": "org.example.missing", "key": "k", "value": "true"},
                ]
            },
        )

        plan = GSettingSubsystem().sync(plan_ctx).plan(plan_ctx)
        summary = plan.describe()

        assert _ops(plan) == [(Verb.SET, "gsetting:org.gnome.desktop.interface.color-scheme")]
        assert summary.operations[0].details == "'default' -> 'prefer-dark'"
        assert [w.target for w in summary.warnings] == ["gsetting:org.example.missing.k"]

        plan.execute(exec_ctx)

        assert host.gsettings[("org.gnome.desktop.interface", "color-scheme")] == "'prefer-dark'"

    def test_boolean_value_converges(self, host, plan_ctx, exec_ctx, user_dir):
        """A YAML boolean is set as GVariant text and matches on the next plan."""
        host.gsettings[("org.gnome.desktop.interface", "clock-show-seconds")] = "false"
        write_manifest(
            user_dir,
            "gsettings.yaml",
            {
                "settings": [
                    {
                        "schema": "org.gnome.desktop.interface",
                        "key": "clock-show-seconds",
                        "value": True,
                    }
                ]
            },
        )

        plan = GSettingSubsystem().sync(plan_ctx).plan(plan_ctx)
        assert plan.describe().operations[0].details == "false -> true"

        plan.execute(exec_ctx)

        assert host.gsettings[("org.gnome.desktop.interface", "clock-show-seconds")] == "true"
        assert GSettingSubsystem().sync(plan_ctx).plan(plan_ctx).is_empty()

    def test_no_capture(self, plan_ctx):
        """gsetting has no capture direction."""
        subsystem = GSettingSubsystem()
        assert not subsystem.supports_capture()
        assert subsystem.capture(plan_ctx) is None


class TestShim:
    """Tests for the host shim subsystem."""

    def test_render_and_parse(self):
        """A rendered shim parses back to the same Shim."""
        shim = Shim("docker", host="podman")
        assert parse_shim("docker", render_shim(shim)) == shim
        assert parse_shim("podman", render_shim(Shim("podman"))) == Shim("podman")

    def test_create_update_and_warn(self, plan_ctx, exec_ctx, user_dir, shims_dir):
        """Missing shims are created, changed ones rewritten, extra ones reported."""
        shims_dir.mkdir()
        (shims_dir / "docker").write_text('#!/bin/sh\nexec flatpak-spawn --host docker "$@"\n')
        (shims_dir / "stray").write_text("#!/bin/sh\necho hi\n")
        write_manifest(
            user_dir,
            "host-shims.yaml",
            {"shims": [{"name": "docker", "host": "podman"}, "systemctl"]},
        )

        plan = ShimSubsystem().sync(plan_ctx).plan(plan_ctx)
        summary = plan.describe()

        assert _ops(plan) == [(Verb.CREATE, "shim:systemctl"), (Verb.UPDATE, "shim:docker")]
        assert [w.target for w in summary.warnings] == ["shim:stray"]

        plan.execute(exec_ctx)

        assert "--host podman" in (shims_dir / "docker").read_text()
        assert (shims_dir / "systemctl").stat().st_mode & 0o111
        assert (shims_dir / "stray").exists()


class TestHomebrew:
    """Tests for the homebrew subsystem."""

    def test_taps_before_formulae(self, host, plan_ctx, exec_ctx, user_dir):
        """Required taps are added before any install."""
        host.formulae = {"jq"}
        write_manifest(
            user_dir,
            "homebrew.yaml",
            {"formulae": ["jq", "ripgrep", "hashicorp/tap/terraform"]},
        )

        plan = HomebrewSubsystem().sync(plan_ctx).plan(plan_ctx)

        assert _ops(plan) == [
            (Verb.INSTALL, "tap:hashicorp/tap"),
            (Verb.INSTALL, "brew:ripgrep"),
            (Verb.INSTALL, "brew:terraform"),
        ]

        report = plan.execute(exec_ctx)

        assert report.all_succeeded()
        assert host.formulae == {"jq", "ripgrep", "terraform"}

    def test_existing_tap_is_not_re_added(self, host, plan_ctx, user_dir):
        """Already tapped repositories produce no tap operation."""
        host.taps = {"hashicorp/tap"}
        write_manifest(user_dir, "homebrew.yaml", {"formulae": ["hashicorp/tap/terraform"]})

        plan = HomebrewSubsystem().sync(plan_ctx).plan(plan_ctx)

        assert _ops(plan) == [(Verb.INSTALL, "brew:terraform")]

    def test_declared_tap_added_without_missing_formulae(
        self, host, plan_ctx, exec_ctx, user_dir
    ):
        """Explicit taps are added even when every formula is installed."""
        host.formulae = {"jq"}
        write_manifest(user_dir, "homebrew.yaml", {"formulae": ["jq"], "taps": ["x/y"]})

        plan = HomebrewSubsystem().sync(plan_ctx).plan(plan_ctx)

        assert _ops(plan) == [(Verb.INSTALL, "tap:x/y")]

        plan.execute(exec_ctx)

        assert host.taps == {"x/y"}
        assert HomebrewSubsystem().sync(plan_ctx).plan(plan_ctx).is_empty()

    def test_capture_only_leaves(self, host, plan_ctx, exec_ctx, user_dir):
        """Dependencies are not captured, only formulae installed on request."""
        host.formulae = {"jq", "oniguruma", "gh"}
        host.leaves = {"jq", "gh"}
        write_manifest(user_dir, "homebrew.yaml", {"formulae": ["gh"], "taps": ["a/b"]})

        plan = HomebrewSubsystem().capture(plan_ctx).plan(plan_ctx)
        assert _ops(plan) == [(Verb.CAPTURE, "brew:jq")]

        plan.execute(exec_ctx)

        assert read_manifest(user_dir / "homebrew.yaml") == {"formulae": ["gh", "jq"], "taps": ["a/b"]}

    def test_install_failure_is_recorded(self, host, plan_ctx, exec_ctx, user_dir):
        """A failing install does not stop the next formula."""
        host.failures["brew install bat"] = "Error: No available formula"
        write_manifest(user_dir, "homebrew.yaml", {"formulae": ["bat", "fd"]})

        report = HomebrewSubsystem().sync(plan_ctx).plan(plan_ctx).execute(exec_ctx)

        assert report.failure_count() == 1
        assert report.success_count() == 1
        assert "No available formula" in report.failures()[0].error
        assert "fd" in host.formulae


class TestSystemPackages:
    """Tests for the layered packages subsystem."""

    def test_parse_requested_packages(self):
        """The first deployment's requested packages are used."""
        output = json.dumps(
            {"deployments": [{"requested-packages": ["tmux", "htop"]}, {"requested-packages": ["old"]}]}
        )
        assert parse_requested_packages(output) == ["htop", "tmux"]

    def test_drift_uses_string_sets(self, host, plan_ctx, user_dir):
        """Layered packages are compared by name."""
        host.layered = ["htop", "tmux"]
        write_manifest(user_dir, "system-packages.yaml", {"packages": ["htop", "zsh"]})

        status = SystemSubsystem().component(plan_ctx).status()

        assert (status.total, status.synced, status.pending, status.untracked) == (2, 1, 1, 1)

    def test_capture_only(self, host, plan_ctx, exec_ctx, user_dir):
        """system supports capture but not sync."""
        host.layered = ["htop"]
        subsystem = SystemSubsystem()

        assert subsystem.sync(plan_ctx) is None
        subsystem.capture(plan_ctx).plan(plan_ctx).execute(exec_ctx)

        assert read_manifest(user_dir / "system-packages.yaml") == {"packages": ["htop"]}

    def test_garbage_output_is_a_scan_error(self, host, plan_ctx):
        """Unparseable rpm-ostree output aborts planning."""
        with patch.object(host, "_rpm_ostree", return_value=CommandOutput(0, "not json")):
            with pytest.raises(ScanError, match="unexpected rpm-ostree output"):
                SystemSubsystem().component(plan_ctx).scan_system()
