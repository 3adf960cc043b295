"""
Capture constants: custom device descriptors, desktop default, output naming.

Descriptors use the same keys as Playwright's `devices` table so they can be
fed through `DeviceProfile.from_descriptor` like any preset.
"""

from __future__ import annotations

IOS_18_SAFARI_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 18_0 like Mac OS X) "
    "AppleWebKit/605.1.15 (KHTML, like Gecko) "
    "Version/18.0 Mobile/15E148 Safari/604.1"
)

DESKTOP_CHROME_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

# iPhone 15/16 stand-ins for names missing from the preset table
CUSTOM_DEVICES: dict[str, dict] = {
    "iPhone 16": {
        "viewport": {"width": 393, "height": 852},
        "user_agent": IOS_18_SAFARI_UA,
        "device_scale_factor": 3,
        "is_mobile": True,
        "has_touch": True,
    },
    "iPhone 16 Pro Max": {
        "viewport": {"width": 430, "height": 932},
        "user_agent": IOS_18_SAFARI_UA,
        "device_scale_factor": 3,
        "is_mobile": True,
        "has_touch": True,
    },
}

DESKTOP_CHROME = "Desktop Chrome"

# Used only when the preset table has no "Desktop Chrome" entry
DESKTOP_CHROME_DEFAULT: dict = {
    "viewport": {"width": 1280, "height": 720},
    "user_agent": DESKTOP_CHROME_UA,
    "device_scale_factor": 1,
    "is_mobile": False,
    "has_touch": False,
}

# Substrings that route unknown names to the custom iPhone profiles
IPHONE_FALLBACK_FAMILIES = ("iPhone 15", "iPhone 16")
IPHONE_LARGE_MARKERS = ("Pro Max", "Plus")

HTML_SUFFIX = ".html"
SCREENSHOT_SUFFIX = ".png"
