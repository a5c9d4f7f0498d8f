"""
FocusTrack Documentation Tree Test Suite

Test ID | Description                    | Expectation
--------|--------------------------------|-----------------------------------
1       | Sphinx source tree             | conf.py has a root document
2       | API reference targets          | every automodule imports
"""

import importlib
import os
import re
import sys

import pytest

# Add project root to path
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, ROOT)

DOCS_SOURCE = os.path.join(ROOT, "docs", "source")


def read_doc(name):
    with open(os.path.join(DOCS_SOURCE, name), "r", encoding="utf-8") as f:
        return f.read()


def automodule_targets():
    return re.findall(r"^\.\. automodule:: (\S+)$", read_doc("api.rst"), re.MULTILINE)


# =============================================================================
# TEST 1: Source tree
# =============================================================================


class TestDocsTree:
    def test_root_document_lists_api(self):
        index = read_doc("index.rst")

        assert ".. toctree::" in index
        assert re.search(r"^\s+api$", index, re.MULTILINE)

    def test_conf_paths_exist(self):
        namespace = {}
        exec(compile(read_doc("conf.py"), "conf.py", "exec"), namespace)

        for key in ("templates_path", "html_static_path"):
            for path in namespace[key]:
                assert os.path.isdir(os.path.join(DOCS_SOURCE, path))


# =============================================================================
# TEST 2: API reference
# =============================================================================


class TestApiReference:
    def test_every_module_documented(self):
        documented = set(automodule_targets())
        package = os.path.join(ROOT, "focustrack")
        modules = {
            "focustrack."
            + os.path.relpath(os.path.join(dirpath, name), package)[:-3].replace(os.sep, ".")
            for dirpath, _, files in os.walk(package)
            for name in files
            if name.endswith(".py") and name != "__init__.py"
        }

        assert modules == documented

    @pytest.mark.parametrize("module", automodule_targets())
    def test_automodule_target_imports(self, module):
        assert importlib.import_module(module).__doc__
