"""Validate layer import boundaries for blog_gen.

`core` holds the pure content pipeline and must stay importable without the
filesystem loader, the HTTP server, or the CLI. `adapters` may use `core` but
not the outer surfaces.
"""

from __future__ import annotations

import argparse
import ast
from collections.abc import Iterator
from pathlib import Path

PACKAGE = "blog_gen"
PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_SOURCE_ROOT = PROJECT_ROOT / "src" / PACKAGE
KNOWN_LAYERS = frozenset({"api", "core", "adapters", "cli"})
RULES: dict[str, frozenset[str]] = {
    "core": frozenset({"api", "adapters", "cli"}),
    "adapters": frozenset({"api", "cli"}),
}


def _module_parts(path: Path, source_root: Path) -> list[str]:
    return [PACKAGE, *path.relative_to(source_root).with_suffix("").parts]


def _imported_modules(tree: ast.AST, module_parts: list[str]) -> Iterator[str]:
    """Yield absolute module names, plus `pkg.name` for each `from pkg import name`."""
    package_parts = module_parts[:-1]
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            yield from (alias.name for alias in node.names)
            continue
        if not isinstance(node, ast.ImportFrom):
            continue
        if node.level:
            if node.level > len(package_parts):
                continue
            base = package_parts[: len(package_parts) - node.level + 1]
            module = ".".join([*base, *(node.module.split(".") if node.module else [])])
        else:
            module = node.module or ""
        if not module:
            continue
        yield module
        for alias in node.names:
            yield f"{module}.{alias.name}"


def layer_of(module: str) -> str | None:
    parts = module.split(".")
    if len(parts) < 2 or parts[0] != PACKAGE:
        return None
    return parts[1] if parts[1] in KNOWN_LAYERS else None


def check_file(path: Path, source_root: Path = DEFAULT_SOURCE_ROOT) -> list[str]:
    try:
        module_parts = _module_parts(path, source_root)
    except ValueError:
        return []
    if len(module_parts) < 3:
        return []
    banned = RULES.get(module_parts[1], frozenset())
    if not banned:
        return []

    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    hits = {layer_of(module) for module in _imported_modules(tree, module_parts)}
    return [
        f"{path}: {module_parts[1]} must not import {PACKAGE}.{layer}"
        for layer in sorted(layer for layer in hits if layer in banned)
    ]


def check_import_boundaries(source_root: Path = DEFAULT_SOURCE_ROOT) -> list[str]:
    violations: list[str] = []
    for path in sorted(source_root.rglob("*.py")):
        violations.extend(check_file(path, source_root))
    return violations


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Check blog_gen layer imports.")
    parser.add_argument("--source-root", default=str(DEFAULT_SOURCE_ROOT))
    parsed = parser.parse_args(argv)
    violations = check_import_boundaries(Path(str(parsed.source_root)))
    if violations:
        raise SystemExit("\n".join(violations))
    print("import boundary checks passed")


if __name__ == "__main__":
    main()
