"""Safe import utilities for optional, platform-specific dependencies."""


def safe_import(module_name: str, package_name: str = None):
    """
    Safely import a module, returning None if unavailable.

    Use this for platform-specific modules that only exist on some systems
    (``wmi`` and ``winreg`` on Windows, ``pwd`` on POSIX).

    Args:
        module_name: The module to import (e.g., "wmi", "winreg")
        package_name: Display name for logging (optional, currently unused)

    Returns:
        The imported module, or None if import fails

    Examples:
        >>> wmi = safe_import("wmi")
        >>> if wmi:
        ...     connection = wmi.WMI()
    """
    try:
        return __import__(module_name, fromlist=[''])
    except ImportError:
        return None
