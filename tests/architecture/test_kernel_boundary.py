"""
Kernel boundary and invariants contract.

1. housing_kernel/** may NOT import housing_config.  The kernel never
   depends upward; housing_config.bridges feeds it instead.

2. domain/ and records/ stay free of I/O and SQLAlchemy.

3. The kernel invariants declaration is complete and non-empty.

These tests read source code via AST; they cannot break anything.
"""

import ast
from pathlib import Path

from housing_kernel.invariants import (
    ALL_KERNEL_INVARIANTS,
    FORBIDDEN_KERNEL_IMPORTS,
    KernelInvariant,
)

PACKAGE_ROOT = Path(__file__).resolve().parents[2] / "housing_kernel"


def _python_files(subdir: str = "") -> list[Path]:
    return sorted((PACKAGE_ROOT / subdir).rglob("*.py"))


def _extract_imports(path: Path) -> list[tuple[int, str]]:
    """(line_number, module) for every import in ``path``."""
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom) and node.module:
            results.append((node.lineno, node.module))
    return results


def _violations(files: list[Path], prefixes: tuple[str, ...]) -> list[str]:
    found = []
    for path in files:
        for lineno, module in _extract_imports(path):
            for prefix in prefixes:
                if module == prefix or module.startswith(f"{prefix}."):
                    found.append(f"  {path.relative_to(PACKAGE_ROOT)}:{lineno} imports '{module}'")
    return found


class TestKernelNoUpwardDependencies:

    def test_kernel_files_found(self):
        assert len(_python_files()) > 20

    def test_kernel_does_not_import_config(self):
        violations = _violations(_python_files(), FORBIDDEN_KERNEL_IMPORTS)
        assert not violations, (
            "Kernel boundary violation: housing_kernel/** must not import "
            "housing_config:\n" + "\n".join(violations)
        )


class TestPureLayers:

    PURE_LAYERS = ("domain", "records")
    FORBIDDEN = ("sqlalchemy", "housing_kernel.db", "housing_kernel.services", "os", "io")

    def test_domain_and_records_are_pure(self):
        files = [f for layer in self.PURE_LAYERS for f in _python_files(layer)]
        violations = _violations(files, self.FORBIDDEN)
        assert not violations, (
            "Pure layer imports I/O or an outer layer:\n" + "\n".join(violations)
        )


class TestInvariantsDeclaration:

    def test_invariants_declared(self):
        assert len(ALL_KERNEL_INVARIANTS) == len(KernelInvariant) >= 7

    def test_values_are_stable_names(self):
        for invariant in KernelInvariant:
            assert invariant.value == invariant.name.lower()
