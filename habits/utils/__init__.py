"""
Utilities package for the habit ledger.

- time_utils: ISO week ids, labels and the 'today' resolution
- constants: Application constants and settings access
- response_helpers: JSON response envelopes
- error_handlers: Exception to response mapping
- logging_utils: Structured logging and request ids (imported by settings,
  so this package must stay free of Django imports at module level)
"""
