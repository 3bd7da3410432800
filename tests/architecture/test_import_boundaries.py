"""
Import-boundary enforcement.

1. Engine purity  -- aid_engines/** may not import DB drivers, the ORM,
                     kernel models/db/selectors, services or config.
2. Domain purity  -- aid_kernel/domain/** may not import the ORM or any
                     other kernel layer that does.

All scanning is done via AST; these tests are read-only.
"""

import ast
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[2]


def _python_files(package: str) -> list[Path]:
    """Return all .py files under *package*, sorted for deterministic order."""
    return sorted((REPO_ROOT / package).rglob("*.py"))


def _extract_imports(filepath: Path) -> list[tuple[int, str]]:
    """Return (line_number, module_string) for every import in *filepath*."""
    tree = ast.parse(filepath.read_text(), filename=str(filepath))

    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom) and node.module:
            results.append((node.lineno, node.module))
    return results


def _matches_any(module: str, prefixes: tuple[str, ...]) -> bool:
    """True if *module* equals or is a child of any prefix."""
    return any(module == p or module.startswith(f"{p}.") for p in prefixes)


def _violations(package: str, forbidden: tuple[str, ...]) -> list[str]:
    return [
        f"  {filepath.relative_to(REPO_ROOT)}:{lineno} imports '{module}'"
        for filepath in _python_files(package)
        for lineno, module in _extract_imports(filepath)
        if _matches_any(module, forbidden)
    ]


class TestEnginePurity:
    """aid_engines/** works on DTOs only."""

    FORBIDDEN_PREFIXES = (
        "sqlalchemy",
        "psycopg2",
        "sqlite3",
        "aid_kernel.models",
        "aid_kernel.db",
        "aid_kernel.selectors",
        "aid_services",
        "aid_config",
    )

    def test_engine_files_have_no_forbidden_imports(self):
        violations = _violations("aid_engines", self.FORBIDDEN_PREFIXES)

        assert not violations, (
            "Engine purity violation -- aid_engines/** must not import DB "
            "drivers, ORM, kernel models/db/selectors, services or config:\n"
            + "\n".join(violations)
        )

    def test_scan_sees_engine_sources(self):
        scanned = {p.name for p in _python_files("aid_engines")}

        assert {"demand.py", "reconciler.py", "rollups.py", "tracer.py"} <= scanned


class TestDomainPurity:
    """aid_kernel/domain/** is shared by selectors and engines and stays ORM-free."""

    FORBIDDEN_PREFIXES = (
        "sqlalchemy",
        "aid_kernel.models",
        "aid_kernel.db",
        "aid_kernel.selectors",
    )

    def test_domain_files_have_no_orm_imports(self):
        violations = _violations("aid_kernel/domain", self.FORBIDDEN_PREFIXES)

        assert not violations, (
            "Domain purity violation:\n" + "\n".join(violations)
        )
