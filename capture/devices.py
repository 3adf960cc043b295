"""
Device profile resolution: preset lookup with iPhone 15/16 fallback.

Preset tables are injected (Playwright's `devices` mapping in production)
so the resolver can be exercised without a browser.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from capture.constants import (
    CUSTOM_DEVICES,
    DESKTOP_CHROME,
    DESKTOP_CHROME_DEFAULT,
    IPHONE_FALLBACK_FAMILIES,
    IPHONE_LARGE_MARKERS,
)


@dataclass(frozen=True)
class DeviceProfile:
    """Rendering parameters for one simulated device."""

    viewport_width: int
    viewport_height: int
    user_agent: str
    device_scale_factor: float
    is_mobile: bool
    has_touch: bool

    def __post_init__(self) -> None:
        if self.viewport_width <= 0 or self.viewport_height <= 0:
            raise ValueError(
                f"Viewport must be positive, got {self.viewport_width}x{self.viewport_height}"
            )
        if self.device_scale_factor <= 0:
            raise ValueError(f"device_scale_factor must be positive, got {self.device_scale_factor}")

    @classmethod
    def from_descriptor(cls, descriptor: Mapping[str, Any]) -> "DeviceProfile":
        """Build a profile from a Playwright-style device descriptor."""
        viewport = descriptor["viewport"]
        return cls(
            viewport_width=int(viewport["width"]),
            viewport_height=int(viewport["height"]),
            user_agent=descriptor["user_agent"],
            device_scale_factor=descriptor["device_scale_factor"],
            is_mobile=bool(descriptor["is_mobile"]),
            has_touch=bool(descriptor["has_touch"]),
        )

    def to_context_options(self) -> dict[str, Any]:
        """Keyword arguments for `Browser.new_context`."""
        return {
            "viewport": {"width": self.viewport_width, "height": self.viewport_height},
            "user_agent": self.user_agent,
            "device_scale_factor": self.device_scale_factor,
            "is_mobile": self.is_mobile,
            "has_touch": self.has_touch,
        }

    @property
    def label(self) -> str:
        return f"{self.viewport_width}x{self.viewport_height}@{self.device_scale_factor}x"


def resolve_device_profile(
    device_name: str,
    presets: Optional[Mapping[str, Mapping[str, Any]]] = None,
) -> Optional[DeviceProfile]:
    """
    Resolve a device name to a profile; first match wins.

    1. exact match in presets
    2. names containing "iPhone 15" or "iPhone 16" map to the custom
       "iPhone 16 Pro Max" profile when they also mention "Pro Max" or
       "Plus", otherwise to the custom "iPhone 16" profile
    3. None when nothing matches
    """
    preset = (presets or {}).get(device_name)
    if preset:
        return DeviceProfile.from_descriptor(preset)

    if any(family in device_name for family in IPHONE_FALLBACK_FAMILIES):
        if any(marker in device_name for marker in IPHONE_LARGE_MARKERS):
            return DeviceProfile.from_descriptor(CUSTOM_DEVICES["iPhone 16 Pro Max"])
        return DeviceProfile.from_descriptor(CUSTOM_DEVICES["iPhone 16"])

    return None


def profile_for_device(
    device_name: str,
    presets: Optional[Mapping[str, Mapping[str, Any]]] = None,
) -> Optional[DeviceProfile]:
    """Resolve a device, falling back to the built-in desktop profile for "Desktop Chrome"."""
    profile = resolve_device_profile(device_name, presets)
    if profile is None and device_name == DESKTOP_CHROME:
        return DeviceProfile.from_descriptor(DESKTOP_CHROME_DEFAULT)
    return profile
