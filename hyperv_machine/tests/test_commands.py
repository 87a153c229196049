"""Tests for PowerShell rendering of the typed command vocabulary."""

from __future__ import annotations

import pytest

from hyperv_machine.backend.commands import (
    AddVMHardDiskDrive,
    GetVMIPAddress,
    GetVMState,
    HypervOperation,
    ListSwitches,
    NewVM,
    RemoveVM,
    ResizeVHD,
    SetVMMemory,
    SetVMNetworkAdapter,
    SetVMProcessor,
    StopVM,
    mb_to_bytes,
    quote,
)


class TestQuote:
    def test_plain_value(self):
        assert quote("crc") == "'crc'"

    def test_embedded_single_quote_is_doubled(self):
        assert quote("it's") == "'it''s'"

    def test_path_with_spaces(self):
        assert quote("C:\\Users\\me\\.crc\\machines") == "'C:\\Users\\me\\.crc\\machines'"


def test_mb_to_bytes():
    assert mb_to_bytes(4096) == 4096 * 2**20


class TestNewVM:
    def test_without_switch(self):
        cmd = NewVM("crc", "C:\\store", 8192)
        assert cmd.operation == HypervOperation.NEW_VM
        assert cmd.render() == (
            "Hyper-V\\New-VM 'crc' -Path 'C:\\store' -MemoryStartupBytes 8589934592"
        )

    def test_with_switch(self):
        rendered = NewVM("crc", "C:\\store", 4096, "ExternalSwitch").render()
        assert "-MemoryStartupBytes 4294967296" in rendered
        assert rendered.endswith("-SwitchName 'ExternalSwitch'")


class TestStopVM:
    def test_graceful(self):
        assert StopVM("crc").render() == "Hyper-V\\Stop-VM 'crc'"

    def test_forced_turns_off(self):
        assert StopVM("crc", force=True).render() == "Hyper-V\\Stop-VM 'crc' -TurnOff"


def test_remove_is_forced():
    assert RemoveVM("crc").render() == "Hyper-V\\Remove-VM 'crc' -Force"


class TestSetVMMemory:
    def test_startup_bytes(self):
        assert SetVMMemory("crc", startup_mb=2048).render() == (
            "Hyper-V\\Set-VMMemory -VMName 'crc' -StartupBytes 2147483648"
        )

    @pytest.mark.parametrize("enabled,literal", [(False, "$false"), (True, "$true")])
    def test_dynamic_memory_toggle(self, enabled, literal):
        rendered = SetVMMemory("crc", dynamic_memory_enabled=enabled).render()
        assert rendered.endswith(f"-DynamicMemoryEnabled {literal}")
        assert "-StartupBytes" not in rendered


def test_set_processor():
    assert SetVMProcessor("crc", 2).render() == "Hyper-V\\Set-VMProcessor 'crc' -Count 2"


def test_resize_vhd():
    assert ResizeVHD("C:\\store\\crc.vhdx", 42949672960).render() == (
        "Hyper-V\\Resize-VHD -Path 'C:\\store\\crc.vhdx' -SizeBytes 42949672960"
    )


def test_add_hard_disk():
    assert AddVMHardDiskDrive("crc", "C:\\d.vhdx").render() == (
        "Hyper-V\\Add-VMHardDiskDrive -VMName 'crc' -Path 'C:\\d.vhdx'"
    )


def test_static_mac():
    assert SetVMNetworkAdapter("crc", "00:15:5D:00:00:01").render() == (
        "Hyper-V\\Set-VMNetworkAdapter -VMName 'crc' -StaticMacAddress '00:15:5D:00:00:01'"
    )


def test_list_switches_forces_utf8_output():
    rendered = ListSwitches().render()
    assert rendered.startswith("[Console]::OutputEncoding = [Text.Encoding]::UTF8;")
    assert rendered.endswith("(Hyper-V\\Get-VMSwitch).Name")


def test_state_and_ip_queries_quote_machine_name():
    assert GetVMState("my vm").render() == "( Hyper-V\\Get-VM 'my vm' ).state"
    assert "Hyper-V\\Get-VM 'crc'" in GetVMIPAddress("crc").render()


def test_commands_are_immutable_values():
    assert StopVM("crc", force=True) == StopVM("crc", force=True)
    with pytest.raises(Exception):
        StopVM("crc").force = True  # type: ignore[misc]
