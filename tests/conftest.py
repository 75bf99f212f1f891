"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import os
import sys
from collections.abc import Generator
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local phpscope package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of phpscope modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("phpscope"):
        del sys.modules[module_name]


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Hide PHPSCOPE__* env vars and the user's global config file."""
    for key in [k for k in os.environ if k.startswith("PHPSCOPE__")]:
        monkeypatch.delenv(key)
    monkeypatch.setattr(
        "phpscope.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "global" / "config.yaml"
    )
    yield
