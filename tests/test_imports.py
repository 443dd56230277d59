"""Import tests for the neurotuning package.

This test file verifies:
1. Top-level exports are importable
2. Submodules import without circular import errors
3. Re-exports are the same objects as their canonical location
"""

import importlib
import logging
import sys

import pytest


class TestNoCircularImports:
    """Test that importing submodules doesn't cause circular import errors."""

    def test_import_neurotuning_fresh(self, monkeypatch):
        """neurotuning can be imported from a clean module cache."""
        # Restored by monkeypatch so other test modules keep their class objects
        for name in [k for k in sys.modules if k.startswith("neurotuning")]:
            monkeypatch.delitem(sys.modules, name)

        nt = importlib.import_module("neurotuning")
        assert hasattr(nt, "compute_preferred_directions")

    @pytest.mark.parametrize(
        "submodule",
        [
            "neurotuning.signals",
            "neurotuning.validation",
            "neurotuning.glm",
            "neurotuning.direction",
            "neurotuning.results",
            "neurotuning.tuning",
            "neurotuning.stats",
            "neurotuning.stats.circular",
            "neurotuning.stats.resampling",
        ],
    )
    def test_import_submodule(self, submodule):
        assert importlib.import_module(submodule) is not None


class TestAllExports:
    """Each module's __all__ entries resolve to real attributes."""

    @pytest.mark.parametrize("module_name", ["neurotuning", "neurotuning.stats"])
    def test_all_entries_exist(self, module_name):
        mod = importlib.import_module(module_name)
        missing = [name for name in mod.__all__ if not hasattr(mod, name)]
        assert not missing, f"{module_name}.__all__ lists missing names: {missing}"


class TestReExportsIdentity:
    """Re-exported names are the same object as their canonical location."""

    def test_top_level(self):
        import neurotuning
        from neurotuning.glm import Distribution, FitError
        from neurotuning.tuning import compute_preferred_directions
        from neurotuning.validation import ConfigurationError

        assert neurotuning.compute_preferred_directions is compute_preferred_directions
        assert neurotuning.Distribution is Distribution
        assert neurotuning.FitError is FitError
        assert neurotuning.ConfigurationError is ConfigurationError

    def test_stats(self):
        from neurotuning import stats
        from neurotuning.stats.circular import circular_mean
        from neurotuning.stats.resampling import scramble_fits

        assert stats.circular_mean is circular_mean
        assert stats.scramble_fits is scramble_fits


def test_package_logger_has_null_handler():
    """The package logger stays silent unless the caller configures logging."""
    importlib.import_module("neurotuning")
    handlers = logging.getLogger("neurotuning").handlers
    assert any(isinstance(h, logging.NullHandler) for h in handlers)
