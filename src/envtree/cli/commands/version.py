"""Version command for envtree CLI."""

import sys
from importlib.metadata import version, PackageNotFoundError


def cmd_version() -> int:
    """Display version information.

    Returns:
        Exit code (always 0).
    """
    try:
        et_version = version("envtree")
    except PackageNotFoundError:
        et_version = "development"

    print(f"envtree {et_version}")
    print(f"Python {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")

    print("\nDependencies:")

    deps = [
        ("pyyaml", "Env files and YAML output"),
        ("pydantic", "Env file validation"),
    ]

    for pkg, desc in deps:
        try:
            pkg_version = version(pkg)
            status = f"v{pkg_version}"
        except PackageNotFoundError:
            status = "not installed"
        print(f"  {pkg}: {status} ({desc})")

    return 0
