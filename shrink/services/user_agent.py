"""Browser, OS and device detection from User-Agent strings.

This is keyword and token matching over the common agent formats, good enough
for click breakdowns. Unknown agents leave the fields empty.
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple

# Order matters: Edge and Opera agents also carry "Chrome/", Chrome carries "Safari/"
_BROWSERS: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
    ("Edge", re.compile(r"Edg(?:e|A|iOS)?/([\d.]+)")),
    ("Opera", re.compile(r"(?:OPR|Opera)/([\d.]+)")),
    ("Samsung Internet", re.compile(r"SamsungBrowser/([\d.]+)")),
    ("Firefox", re.compile(r"(?:Firefox|FxiOS)/([\d.]+)")),
    ("Chrome", re.compile(r"(?:Chrome|CriOS)/([\d.]+)")),
    ("Safari", re.compile(r"Version/([\d.]+).*Safari/")),
    ("Internet Explorer", re.compile(r"(?:MSIE |Trident/.*rv:)([\d.]+)")),
    ("curl", re.compile(r"curl/([\d.]+)")),
)

_OPERATING_SYSTEMS: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
    ("iOS", re.compile(r"(?:iPhone|iPad|iPod).*? OS ([\d_]+)")),
    ("Android", re.compile(r"Android ([\d.]+)")),
    ("Windows", re.compile(r"Windows NT ([\d.]+)")),
    ("macOS", re.compile(r"Mac OS X ([\d_.]+)")),
    ("Chrome OS", re.compile(r"CrOS \S+ ([\d.]+)")),
    ("Linux", re.compile(r"Linux()")),
)

_BOT_KEYWORDS = ("bot", "crawl", "spider", "slurp", "curl", "wget", "python-requests", "httpx")


@dataclass
class DeviceInfo:
    browser: Optional[str] = None
    browser_version: Optional[str] = None
    os: Optional[str] = None
    os_version: Optional[str] = None
    device_type: Optional[str] = None


def _match(candidates, user_agent: str) -> Tuple[Optional[str], Optional[str]]:
    for name, pattern in candidates:
        match = pattern.search(user_agent)
        if match:
            version = match.group(1).replace("_", ".") or None
            return name, version
    return None, None


def detect_device_type(user_agent: str) -> str:
    """
    Classify an agent as mobile, tablet, bot or desktop.

    Args:
        user_agent: Non-empty User-Agent header value
    """
    lowered = user_agent.lower()
    if any(keyword in lowered for keyword in _BOT_KEYWORDS):
        return "bot"
    if "ipad" in lowered or "tablet" in lowered or ("android" in lowered and "mobile" not in lowered):
        return "tablet"
    if any(keyword in lowered for keyword in ("mobile", "iphone", "ipod", "android")):
        return "mobile"
    return "desktop"


def parse_user_agent(user_agent: Optional[str]) -> DeviceInfo:
    """Split a User-Agent header into browser, OS and device type."""
    if not user_agent or not user_agent.strip():
        return DeviceInfo()

    browser, browser_version = _match(_BROWSERS, user_agent)
    os_name, os_version = _match(_OPERATING_SYSTEMS, user_agent)
    return DeviceInfo(
        browser=browser,
        browser_version=browser_version,
        os=os_name,
        os_version=os_version,
        device_type=detect_device_type(user_agent),
    )
