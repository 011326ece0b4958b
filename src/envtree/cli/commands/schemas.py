"""Schemas command for envtree CLI."""

from envtree.plugin.discovery import discover_schemas


def cmd_schemas_list() -> int:
    """List all available schemas.

    Returns:
        Exit code (0 for success).
    """
    print("Available Schemas:")
    print("-" * 40)

    schemas = discover_schemas()
    if schemas:
        for name, ep in sorted(schemas.items()):
            # Built-ins are plain references, entry points carry .value
            module_path = f"{ep.value}" if hasattr(ep, "value") else str(ep)
            print(f"  {name:<20} {module_path}")
    else:
        print("  (none found)")

    print()
    print("To register schemas, add entry points in pyproject.toml:")
    print('  [project.entry-points."envtree.schemas"]')
    print('  my_schema = "mypackage.settings:MY_SCHEMA"')

    return 0
