# tests/unit/__init__.py
"""
Unit tests for BrokerDesk.

Unit tests focus on one component at a time, with Supabase replaced by the
in-memory mock from conftest.
"""
