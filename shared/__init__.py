"""
Shared utilities for the page capture tool.

- `shared.config` for environment-based configuration
- `shared.logging` for structlog-based structured logging

The `capture` package treats `shared/` as infrastructure code and keeps
capture-specific logic out of it.
"""
