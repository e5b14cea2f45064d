from __future__ import annotations

import argparse
import ast
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

SRC_DIR = Path(__file__).resolve().parents[1] / "src" / "restbucks"

_FRAMEWORKS = frozenset(
    {
        "fastapi",
        "starlette",
        "sqlalchemy",
        "alembic",
        "redis",
        "httpx",
        "requests",
        "opentelemetry",
    }
)

# Each layer may only depend on the layers below it.
LAYER_RULES: dict[str, frozenset[str]] = {
    "domain": _FRAMEWORKS
    | {
        "pydantic",
        "prometheus_client",
        "restbucks.application",
        "restbucks.infrastructure",
        "restbucks.api",
        "restbucks.client",
    },
    "application": _FRAMEWORKS
    | {
        "restbucks.infrastructure",
        "restbucks.api",
        "restbucks.client",
    },
    "client": frozenset(
        {
            "fastapi",
            "starlette",
            "sqlalchemy",
            "redis",
            "restbucks.domain",
            "restbucks.application",
            "restbucks.infrastructure",
            "restbucks.api",
        }
    ),
}


@dataclass(frozen=True)
class Violation:
    file_path: Path
    line: int
    module: str
    layer: str


def _python_files(root: Path) -> Iterable[Path]:
    if root.is_file() and root.suffix == ".py":
        yield root
        return
    if root.is_dir():
        yield from sorted(root.rglob("*.py"))


def _is_forbidden(module: str, forbidden: frozenset[str]) -> bool:
    return any(module == name or module.startswith(f"{name}.") for name in forbidden)


def _imported_modules(tree: ast.AST) -> Iterable[tuple[int, str]]:
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                yield node.lineno, alias.name
        elif isinstance(node, ast.ImportFrom) and node.module and node.level == 0:
            yield node.lineno, node.module


def scan_layer(layer: str, paths: Sequence[Path]) -> list[Violation]:
    forbidden = LAYER_RULES[layer]
    violations: list[Violation] = []
    for path in paths:
        for file_path in _python_files(path):
            tree = ast.parse(file_path.read_text(encoding="utf-8"), filename=str(file_path))
            violations.extend(
                Violation(file_path=file_path, line=line, module=module, layer=layer)
                for line, module in _imported_modules(tree)
                if _is_forbidden(module, forbidden)
            )
    return violations


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Layer dependency check for restbucks imports.")
    parser.add_argument(
        "--layer",
        choices=sorted(LAYER_RULES),
        action="append",
        default=[],
        help="Layer to check (repeatable). Defaults to every layer.",
    )
    parser.add_argument(
        "--path",
        action="append",
        default=[],
        help="Scan this path with the rules of the single --layer given.",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    layers = args.layer or sorted(LAYER_RULES)

    if args.path:
        if len(layers) != 1:
            print("depcheck: --path needs exactly one --layer")
            return 2
        targets = {layers[0]: [Path(item) for item in args.path]}
    else:
        targets = {layer: [SRC_DIR / layer] for layer in layers}

    violations: list[Violation] = []
    for layer, paths in targets.items():
        violations.extend(scan_layer(layer, paths))

    if not violations:
        print(f"depcheck passed ({', '.join(targets)})")
        return 0

    print("depcheck failed: forbidden imports detected")
    for violation in violations:
        print(f"{violation.file_path}:{violation.line} [{violation.layer}] -> {violation.module}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
