"""
Unit tests for device profile resolution: preset lookup, iPhone 15/16 fallback,
Desktop Chrome default. Presets are injected; no Playwright install needed.
"""

from __future__ import annotations

import pytest

from capture.constants import CUSTOM_DEVICES, DESKTOP_CHROME_DEFAULT
from capture.devices import DeviceProfile, profile_for_device, resolve_device_profile

IPHONE_12 = {
    "viewport": {"width": 390, "height": 844},
    "user_agent": "iPhone 12 UA",
    "device_scale_factor": 3,
    "is_mobile": True,
    "has_touch": True,
    "default_browser_type": "webkit",
}
IPHONE_15 = {
    "viewport": {"width": 393, "height": 659},
    "user_agent": "iPhone 15 UA",
    "device_scale_factor": 3,
    "is_mobile": True,
    "has_touch": True,
    "default_browser_type": "webkit",
}
DESKTOP = {
    "viewport": {"width": 1280, "height": 720},
    "user_agent": "Desktop Chrome UA",
    "device_scale_factor": 1,
    "is_mobile": False,
    "has_touch": False,
    "default_browser_type": "chromium",
}
PRESETS = {"iPhone 12": IPHONE_12, "iPhone 15": IPHONE_15, "Desktop Chrome": DESKTOP}

IPHONE_16 = DeviceProfile.from_descriptor(CUSTOM_DEVICES["iPhone 16"])
IPHONE_16_PRO_MAX = DeviceProfile.from_descriptor(CUSTOM_DEVICES["iPhone 16 Pro Max"])


# --- Preset lookup ---


@pytest.mark.parametrize("name", sorted(PRESETS))
def test_preset_names_resolve_to_the_preset_unchanged(name):
    assert resolve_device_profile(name, PRESETS) == DeviceProfile.from_descriptor(PRESETS[name])


def test_preset_wins_over_iphone_fallback():
    """iPhone 15 is in the table, so the custom profile is not used."""
    profile = resolve_device_profile("iPhone 15", PRESETS)
    assert profile.viewport_height == 659
    assert profile != IPHONE_16


def test_from_descriptor_maps_playwright_keys():
    profile = DeviceProfile.from_descriptor(IPHONE_12)
    assert profile.viewport_width == 390
    assert profile.viewport_height == 844
    assert profile.user_agent == "iPhone 12 UA"
    assert profile.device_scale_factor == 3
    assert profile.is_mobile is True
    assert profile.has_touch is True


def test_to_context_options_round_trips_descriptor_fields():
    options = DeviceProfile.from_descriptor(IPHONE_12).to_context_options()
    assert options == {
        "viewport": {"width": 390, "height": 844},
        "user_agent": "iPhone 12 UA",
        "device_scale_factor": 3,
        "is_mobile": True,
        "has_touch": True,
    }


def test_profile_is_immutable():
    with pytest.raises(AttributeError):
        IPHONE_16.viewport_width = 1  # type: ignore[misc]


def test_profile_rejects_non_positive_viewport():
    with pytest.raises(ValueError):
        DeviceProfile(0, 100, "ua", 1, False, False)
    with pytest.raises(ValueError):
        DeviceProfile(100, 100, "ua", 0, False, False)


# --- iPhone 15/16 fallback ---


def test_custom_iphone_16_profile():
    profile = resolve_device_profile("iPhone 16", PRESETS)
    assert (profile.viewport_width, profile.viewport_height) == (393, 852)
    assert profile.device_scale_factor == 3
    assert "iPhone OS 18_0" in profile.user_agent


def test_custom_iphone_16_pro_max_profile():
    profile = resolve_device_profile("iPhone 16 Pro Max", PRESETS)
    assert (profile.viewport_width, profile.viewport_height) == (430, 932)
    assert profile.device_scale_factor == 3


@pytest.mark.parametrize(
    "name",
    ["iPhone 15 Custom", "iPhone 16 Future", "iPhone 16 Pro", "iPhone 15 Pro", "iPhone 16e"],
)
def test_unknown_iphone_15_16_variants_map_to_iphone_16(name):
    assert resolve_device_profile(name, PRESETS) == IPHONE_16


@pytest.mark.parametrize(
    "name",
    ["iPhone 15 Pro Max Custom", "iPhone 15 Plus Custom", "iPhone 16 Plus", "iPhone 15 Pro Max"],
)
def test_large_iphone_variants_map_to_iphone_16_pro_max(name):
    assert resolve_device_profile(name, PRESETS) == IPHONE_16_PRO_MAX


def test_plus_variant_equals_pro_max_resolution():
    assert resolve_device_profile("iPhone 15 Plus Custom") == resolve_device_profile("iPhone 16 Pro Max")


def test_fallback_works_without_presets():
    assert resolve_device_profile("iPhone 15") == IPHONE_16
    assert resolve_device_profile("iPhone 15", None) == IPHONE_16


# --- Not found ---


@pytest.mark.parametrize("name", ["NonExistentDevice", "iPhone 14 Mini", "Pixel 9", "Desktop Firefox HiDPI"])
def test_unrecognized_names_return_none(name):
    assert resolve_device_profile(name, PRESETS) is None


def test_desktop_chrome_is_not_a_resolver_fallback():
    assert resolve_device_profile("Desktop Chrome", {}) is None


# --- Orchestrator-level desktop default ---


def test_profile_for_device_uses_desktop_default_when_preset_missing():
    profile = profile_for_device("Desktop Chrome", {})
    assert profile == DeviceProfile.from_descriptor(DESKTOP_CHROME_DEFAULT)
    assert (profile.viewport_width, profile.viewport_height) == (1280, 720)
    assert profile.is_mobile is False
    assert profile.has_touch is False
    assert profile.device_scale_factor == 1


def test_profile_for_device_prefers_preset_for_desktop_chrome():
    assert profile_for_device("Desktop Chrome", PRESETS).user_agent == "Desktop Chrome UA"


def test_profile_for_device_passes_through_resolver():
    assert profile_for_device("iPhone 16 Plus", {}) == IPHONE_16_PRO_MAX
    assert profile_for_device("NonExistentDevice", {}) is None
