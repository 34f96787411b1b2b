"""Package initialization for yarn2mcp-publisher.

Having this file allows relative imports (e.g. `from .models import ...`) to
resolve under tooling (mypy/ruff) and matches the CLI usage pattern
`python -m yarn2mcp run` documented in the README.
"""

__all__ = []
