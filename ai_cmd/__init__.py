"""ai-cmd.

This package turns a natural-language request into a short program of typed
steps and executes it against an extensible set of host capabilities.

High-level architecture
-----------------------

- ``ai_cmd.agent_core``:

  - Reply parsing into steps and the call-expression parser.
  - The capability registry and the built-in extension.
  - The hook pipeline and plugin base classes.
  - A LangGraph-based step dispatcher.

- ``ai_cmd.core``: settings and logging configuration.
- ``ai_cmd.cli``: the ``ai-cmd`` command line entry point.

Typical workflow
----------------

Most integrations should use ``ai_cmd.agent_core.factory.build_service``:

1. Build an ``AICommandService`` from ``Settings``.
2. Call ``run`` with a request.
3. Inspect the returned ``DispatchOutcome``.
"""
