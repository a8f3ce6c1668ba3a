"""Coverage engine - NFL defensive coverage and route execution.

- Single coordinate system (yards, x sideline to sideline, +Y downfield)
- Defenders tagged with roles once, never inferred from ids
- Every subsystem returns deltas; the host play engine applies them
"""

__version__ = "0.1.0"
