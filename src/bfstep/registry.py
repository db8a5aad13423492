"""Dynamic discovery and registry of loop-matcher modules.

Searches the matchers/ subpackage for public modules, imports them, and
keeps those that provide a callable build(code) function.
"""

import importlib
import pathlib
import sys
from types import ModuleType

DEFAULT_MATCHER = "scan"
MATCHERS_PACKAGE = "bfstep.matchers"


def is_valid_matcher(module: ModuleType) -> bool:
    """Validate module has callable build function."""
    return hasattr(module, 'build') and callable(module.build)


def discover_matchers() -> dict[str, ModuleType]:
    """
    Dynamically discover all loop-matcher modules.

    Returns:
        Dictionary mapping matcher names (module stems, e.g. 'scan', 'table')
        to modules. The default matcher comes first, the rest by name.

    Raises:
        RuntimeError: If no valid matchers are found
    """
    matchers: dict[str, ModuleType] = {}
    matchers_dir = pathlib.Path(__file__).parent.resolve() / 'matchers'

    for file_path in sorted(matchers_dir.glob('*.py')):
        name = file_path.stem
        if name.startswith('_'):
            continue

        try:
            module = importlib.import_module(f"{MATCHERS_PACKAGE}.{name}")
        except Exception as e:
            print(f"Warning: Failed to import matcher {name}: {e} - skipping", file=sys.stderr)
            continue

        if is_valid_matcher(module):
            matchers[name] = module

    if not matchers:
        raise RuntimeError("No valid loop matchers found")

    return dict(sorted(matchers.items(), key=lambda x: (x[0] != DEFAULT_MATCHER, x[0])))


_MATCHER_REGISTRY = discover_matchers()


def get_available_matchers() -> list[str]:
    """Return matcher names, default first."""
    return list(_MATCHER_REGISTRY.keys())


def get_matcher(name: str) -> ModuleType:
    """
    Get the matcher module for a given name.

    Raises:
        ValueError: If name is not found
    """
    if name in _MATCHER_REGISTRY:
        return _MATCHER_REGISTRY[name]
    available = ', '.join(get_available_matchers())
    raise ValueError(f"Unknown matcher: {name}. Available: {available}")
