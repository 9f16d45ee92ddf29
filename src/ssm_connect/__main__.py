"""Allow ``python -m ssm_connect`` invocation.

Delegates to the CLI error-boundary entry point so that
``python -m ssm_connect`` behaves identically to the ``ssm-connect``
console script.
"""

from __future__ import annotations

from ssm_connect.cli.app import cli

if __name__ == "__main__":
    cli()
