"""
Top‑level package for the Council Planner API.

This file makes ``council_planner`` a Python package so that modules
within ``app`` can be imported using fully qualified names like
``council_planner.app.main``.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
