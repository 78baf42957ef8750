"""Tests for host detection and the preflight stage"""

import pytest

from nexus_deploy.installer import host
from nexus_deploy.installer.host import HostFacts, parse_os_release, version_tuple
from nexus_deploy.installer.pipeline import StageStatus
from nexus_deploy.installer.preflight import confirm_stage, evaluate_host, preflight_stage
from nexus_deploy.installer.prompts import UserChoices

from conftest import DEBIAN_RELEASE


@pytest.fixture
def roomy_host(monkeypatch):
    """A host with plenty of memory and disk"""
    monkeypatch.setattr(host, "total_memory_gb", lambda: 32)
    monkeypatch.setattr(host, "free_disk_gb", lambda path: 100)


class TestHostParsing:
    """os-release and version parsing"""

    def test_parse_os_release(self):
        """Test quoted and unquoted values and comments"""
        values = parse_os_release('# comment\nNAME="Ubuntu"\nVERSION_ID="22.04"\nID=ubuntu\n\n')
        assert values["ID"] == "ubuntu"
        assert values["VERSION_ID"] == "22.04"
        assert values["NAME"] == "Ubuntu"

    def test_versions_compare_numerically(self):
        """Test version keys compare as integers, not strings"""
        assert version_tuple("1.9") < version_tuple("1.80")
        assert version_tuple("24.04") > version_tuple("20.04")
        assert version_tuple("rustc 1.80.1") == (1, 80, 1)


class TestEvaluateHost:
    """Advisory selection"""

    def facts(self, **changes):
        """Healthy Ubuntu host facts with overrides"""
        values = dict(os_id="ubuntu", os_version="24.04", memory_gb=16, cpu_cores=8, disk_free_gb=50)
        values.update(changes)
        return HostFacts(**values)

    def test_healthy_host_has_no_advisories(self, config):
        """Test a well-provisioned host gets no warnings"""
        assert evaluate_host(self.facts(), config["host"]) == []

    def test_old_os_version(self, config):
        """Test an OS below the minimum version is flagged"""
        advisories = evaluate_host(self.facts(os_version="18.04"), config["host"])
        assert len(advisories) == 1
        assert "18.04" in advisories[0]

    def test_low_memory_and_disk(self, config):
        """Test low memory and low disk each produce an advisory"""
        advisories = evaluate_host(self.facts(memory_gb=3, disk_free_gb=4), config["host"])
        assert len(advisories) == 2
        assert "--memory-conservative" in advisories[0]
        assert "4GB" in advisories[1]


class TestPreflightStage:
    """Preflight as a pipeline stage"""

    def test_ubuntu_passes(self, make_ctx, roomy_host):
        """Test an Ubuntu host passes and facts are stored"""
        ctx = make_ctx()
        result = preflight_stage(ctx)
        assert result.status is StageStatus.SUCCESS
        assert ctx.facts.os_id == "ubuntu"
        assert ctx.facts.memory_gb == 32

    def test_other_distro_is_fatal(self, make_ctx, os_release, roomy_host):
        """Test a non-Ubuntu host is rejected"""
        os_release.write_text(DEBIAN_RELEASE)
        ctx = make_ctx()
        result = preflight_stage(ctx)
        assert result.status is StageStatus.FATAL
        assert "debian" in result.message
        assert ctx.facts is None

    def test_missing_os_release_is_fatal(self, make_ctx, os_release, roomy_host):
        """Test a host without os-release is rejected"""
        os_release.unlink()
        result = preflight_stage(make_ctx())
        assert result.status is StageStatus.FATAL

    def test_low_memory_is_advisory(self, make_ctx, log, monkeypatch):
        """Test low memory warns but does not fail"""
        monkeypatch.setattr(host, "total_memory_gb", lambda: 2)
        monkeypatch.setattr(host, "free_disk_gb", lambda path: 100)
        result = preflight_stage(make_ctx())
        assert result.status is StageStatus.ADVISORY
        assert "[WARNING]" in log.text

    def test_messages_follow_check_order(self, make_ctx, log, monkeypatch):
        """Test each warning is printed next to the check it belongs to"""
        monkeypatch.setattr(host, "total_memory_gb", lambda: 2)
        monkeypatch.setattr(host, "free_disk_gb", lambda path: 1)

        result = preflight_stage(make_ctx())

        text = log.text
        memory = text.index("--memory-conservative")
        cpu = text.index("CPU cores")
        disk = text.index("free disk space")
        assert memory < cpu < disk
        assert len(result.advisories) == 2


class TestConfirmStage:
    """Continue-or-abort after preflight"""

    def test_declined(self, make_ctx):
        """Test declining cancels the run"""
        ctx = make_ctx(UserChoices(proceed=False))
        assert confirm_stage(ctx).status is StageStatus.CANCELLED
        assert ctx.choices.proceed is False

    def test_accepted(self, make_ctx):
        """Test accepting continues the run"""
        assert confirm_stage(make_ctx(UserChoices(proceed=True))).status is StageStatus.SUCCESS
