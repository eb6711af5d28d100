"""
Pytest configuration for local imports and shared label fixtures.
"""

# Standard Library
import os
import sys

# PIP3 modules
import pytest

#============================================


def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path so the namespace package imports.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()


#============================================
@pytest.fixture
def write_zpl(tmp_path):
	"""
	Factory that writes ZPL text to a label file under tmp_path.
	"""
	def _write(text: str, name: str = "label.zpl"):
		path = tmp_path / name
		path.write_text(text, encoding="utf-8")
		return path
	return _write
