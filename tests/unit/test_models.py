"""Tests for the hardware and category enums and passkey masking."""

from types import SimpleNamespace

from tcbot.config import Config
from tcbot.database.models import Category, HardwareMake, HardwareType, hide_passkey


def test_passkey_masked_after_eight_characters() -> None:
    assert hide_passkey("abcd1234" + "f" * 24) == "abcd1234" + "*" * 24


def test_short_passkey_not_masked() -> None:
    assert hide_passkey("abc") == "abc"
    assert hide_passkey(None) == ""


def test_enum_lookup_ignores_case_and_whitespace() -> None:
    assert HardwareMake.get(" nvidia ") == HardwareMake.NVIDIA
    assert HardwareType.get("Gpu") == HardwareType.GPU
    assert Category.get("amd_gpu") == Category.AMD_GPU


def test_unknown_values_are_invalid() -> None:
    assert HardwareMake.get("voodoo") == HardwareMake.INVALID
    assert HardwareType.get("") == HardwareType.INVALID
    assert Category.get("invalid") == Category.INVALID


def test_category_hardware_support() -> None:
    amd_gpu = SimpleNamespace(make=HardwareMake.AMD, hardware_type=HardwareType.GPU)
    intel_cpu = SimpleNamespace(make=HardwareMake.INTEL, hardware_type=HardwareType.CPU)

    assert Category.AMD_GPU.is_hardware_supported(amd_gpu)
    assert not Category.NVIDIA_GPU.is_hardware_supported(amd_gpu)
    assert not Category.AMD_GPU.is_hardware_supported(intel_cpu)
    assert Category.WILDCARD.is_hardware_supported(intel_cpu)
    assert not Category.INVALID.is_hardware_supported(amd_gpu)


def test_maximum_users_per_team_sums_category_caps() -> None:
    expected = Config.USERS_IN_AMD_GPU + Config.USERS_IN_NVIDIA_GPU + Config.USERS_IN_WILDCARD

    assert Category.maximum_permitted_amount_for_all_categories() == expected
    assert Category.INVALID.permitted_users() == 0


def test_category_display_names() -> None:
    assert [c.display_name for c in Category.valid()] == ["AMD GPU", "Nvidia GPU", "Wildcard"]
