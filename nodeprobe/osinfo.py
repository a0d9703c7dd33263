"""Operating system version and uptime."""

import platform
import sys
import time
from datetime import timedelta
from pathlib import Path

import psutil

OS_RELEASE_PATH = "/etc/os-release"

_DEBIAN_LIKE = {"debian", "ubuntu", "centos", "rhel", "ol", "amzn", "sles"}


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    out = []
    chars = iter(value)
    for ch in chars:
        if ch == "\\":
            out.append(next(chars, ""))
        else:
            out.append(ch)
    return "".join(out)


def read_os_release(path) -> dict:
    """Read an os-release file into a dict of keys to unquoted values."""
    result = {}
    for raw in Path(path).read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        result[key.strip()] = _unquote(value.strip())
    return result


def os_version_from_release(path) -> str:
    """Describe the OS named in an os-release file, e.g. "cos 77-12293.0.0"."""
    info = read_os_release(path)
    os_id = info.get("ID", "")
    if os_id == "cos":
        return f"{os_id} {info.get('VERSION', '')}-{info.get('BUILD_ID', '')}"
    if os_id in _DEBIAN_LIKE:
        return f"{os_id} {info.get('VERSION', '')}"
    raise ValueError(f'Unsupported ID in /etc/os-release: "{os_id}"')


def _windows_version() -> str:
    import winreg

    product_name = "windows"
    ubr = 0
    with winreg.OpenKey(
        winreg.HKEY_LOCAL_MACHINE,
        r"SOFTWARE\Microsoft\Windows NT\CurrentVersion",
        0,
        winreg.KEY_QUERY_VALUE,
    ) as key:
        try:
            product_name = winreg.QueryValueEx(key, "ProductName")[0]
        except OSError:
            pass
        try:
            ubr = int(winreg.QueryValueEx(key, "UBR")[0])
        except OSError:
            pass
    info = sys.getwindowsversion()
    major, minor, build = getattr(info, "platform_version", (info.major, info.minor, info.build))
    return f"windows {major}.{minor}.{build}.{ubr} ({product_name})"


def get_os_version() -> str:
    """Describe the running operating system."""
    if sys.platform.startswith("linux"):
        return os_version_from_release(OS_RELEASE_PATH)
    if sys.platform == "darwin":
        return f"darwin {platform.mac_ver()[0]}"
    if sys.platform == "win32":
        return _windows_version()
    raise OSError(f"unsupported platform {sys.platform!r}")


def get_uptime_duration() -> timedelta:
    """Return the time elapsed since boot, in whole seconds."""
    if sys.platform.startswith("linux"):
        try:
            seconds = float(Path("/proc/uptime").read_text().split()[0])
            return timedelta(seconds=int(seconds))
        except (OSError, ValueError, IndexError):
            pass
    return timedelta(seconds=int(time.time() - psutil.boot_time()))