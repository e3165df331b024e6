"""
Test helper utilities for apnea cluster testing.

This module provides reusable builders for synthetic apnea events,
FLG readings and detail-export rows.
"""
