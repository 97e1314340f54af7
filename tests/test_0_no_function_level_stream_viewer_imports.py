"""Guard: no function-level `import stream_viewer` inside src/.

A function-level `import stream_viewer.x.y` shadows the module-level
`stream_viewer` binding for the ENTIRE enclosing function, causing
UnboundLocalError on any `stream_viewer.` reference that precedes it.

This file is named with `test_0_` so it runs first.
"""

import ast
import os


_SRC_ROOT = os.path.join(os.path.dirname(__file__), "..", "src", "stream_viewer")


def _find_function_level_imports():
    """Walk all .py files and flag `import stream_viewer.*` or `from stream_viewer...` inside functions."""
    violations = []
    for dirpath, _dirs, files in os.walk(_SRC_ROOT):
        for fname in files:
            if not fname.endswith(".py"):
                continue
            path = os.path.join(dirpath, fname)
            with open(path) as f:
                tree = ast.parse(f.read(), filename=path)

            rel = os.path.relpath(path, _SRC_ROOT)
            for node in ast.walk(tree):
                if not isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                    continue
                for child in ast.walk(node):
                    if isinstance(child, ast.Import):
                        names = [alias.name for alias in child.names]
                    elif isinstance(child, ast.ImportFrom):
                        names = [child.module or ""]
                    else:
                        continue
                    for name in names:
                        if name.startswith("stream_viewer"):
                            violations.append(
                                f"{rel}:{child.lineno} function-level import of {name}"
                            )
    return violations


def test_source_tree_exists():
    assert os.path.isdir(_SRC_ROOT)


def test_no_function_level_stream_viewer_imports():
    violations = _find_function_level_imports()
    assert violations == [], (
        "Import stream_viewer modules at module level:\n"
        + "\n".join(f"  {v}" for v in violations)
    )
