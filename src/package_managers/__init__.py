"""Package manager detection for JavaScript projects."""

from .helper import PackageManagerHelper
from .package_manager import PackageManager, build_package_manager

__all__ = [
    "PackageManagerHelper",
    "PackageManager",
    "build_package_manager",
]
