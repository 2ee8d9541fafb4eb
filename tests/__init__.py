"""Form-Foundry Test Suite.

Test organization:
- unit/: one module per forms module (validators, visibility, form state,
  submission, view, config loader, CLI, ...)
- integration/: end-to-end flows from a YAML definition to a submitted payload

HTTP endpoints are simulated with httpx.MockTransport; nothing here needs
network access except the CLI test for an unreachable local port.
"""
