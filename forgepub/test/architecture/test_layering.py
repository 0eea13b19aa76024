from __future__ import annotations

import ast
import os
from dataclasses import dataclass
from pathlib import Path

import pytest


@dataclass(frozen=True, slots=True)
class ImportRef:
    module: str
    line: int


def require_arch_checks_enabled() -> None:
    """Skip architecture checks unless explicitly enabled."""
    if os.getenv("FORGEPUB_ARCH_CHECKS") != "1":
        pytest.skip("architecture checks are opt-in; set FORGEPUB_ARCH_CHECKS=1 to enable")


def package_root() -> Path:
    return Path(__file__).resolve().parents[2]


def iter_python_files(base: Path) -> list[Path]:
    return [
        path
        for path in sorted(base.rglob("*.py"))
        if "__pycache__" not in path.parts and "test" not in path.relative_to(package_root()).parts
    ]


def parse_imports(path: Path) -> list[ImportRef]:
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    imports: list[ImportRef] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            imports.extend(ImportRef(module=alias.name, line=node.lineno) for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and not node.level and node.module:
            imports.append(ImportRef(module=node.module, line=node.lineno))
    return imports


def matches_prefix(module: str, prefix: str) -> bool:
    return module == prefix or module.startswith(prefix + ".")


def _offenders(subpackage: str, forbidden: tuple[str, ...]) -> list[str]:
    root = package_root()
    offenders: list[str] = []
    for file_path in iter_python_files(root / subpackage):
        rel = file_path.relative_to(root)
        for item in parse_imports(file_path):
            if any(matches_prefix(item.module, prefix) for prefix in forbidden):
                offenders.append(f"{rel}:{item.line}: forbidden import '{item.module}'")
    return offenders


@pytest.mark.parametrize(
    ("subpackage", "forbidden"),
    [
        ("core", ("forgepub.cli", "forgepub.gitea", "forgepub.release", "forgepub.git")),
        ("release", ("forgepub.cli", "forgepub.gitea")),
        ("gitea", ("forgepub.cli",)),
        ("git", ("forgepub.cli", "forgepub.gitea", "forgepub.release")),
    ],
)
def test_layer_boundaries(subpackage: str, forbidden: tuple[str, ...]) -> None:
    require_arch_checks_enabled()

    offenders = _offenders(subpackage, forbidden)

    assert not offenders, f"{subpackage} dependency violations:\n" + "\n".join(offenders)


def test_rich_only_in_output() -> None:
    require_arch_checks_enabled()

    root = package_root()
    offenders = [
        f"{path.relative_to(root)}:{item.line}"
        for path in iter_python_files(root)
        if path.relative_to(root).parts[0] != "output"
        for item in parse_imports(path)
        if matches_prefix(item.module, "rich")
    ]

    assert not offenders, "rich imported outside forgepub.output:\n" + "\n".join(offenders)


def test_subprocess_only_in_platform() -> None:
    require_arch_checks_enabled()

    root = package_root()
    offenders = [
        f"{path.relative_to(root)}:{item.line}"
        for path in iter_python_files(root)
        if path.relative_to(root).parts[0] != "platform"
        for item in parse_imports(path)
        if item.module == "subprocess"
    ]

    assert not offenders, "subprocess used outside forgepub.platform:\n" + "\n".join(offenders)
