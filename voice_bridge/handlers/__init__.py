"""
Handlers module for side effects triggered by the voice model.

Key components:
- tool_handlers: Executes the ``book_meeting`` tool call (argument validation,
  end time computation, calendar booking) and produces the result payload the
  model narrates back to the caller.
"""
