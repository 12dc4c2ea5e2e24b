# src/brokerdesk/adapters/__init__.py
"""
Adapters package.

Concrete implementations of the core ports:
- identity: Supabase Auth
- storage: JSON file and in-memory key/value storage
- theme: document-level visual mode
"""
