# tests/integration/__init__.py
"""
Integration tests for BrokerDesk.

Integration tests drive the fully wired DashboardApp and the CLI end to end
against the Supabase mock.
"""
