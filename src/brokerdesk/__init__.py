# src/brokerdesk/__init__.py
"""
BrokerDesk sync core.

Keeps a signed-in broker's six dashboard collections (leads, properties,
tasks, messages, events, transactions) in step with Supabase, and their
local settings in step with disk.
"""

__version__ = "0.1.0"
