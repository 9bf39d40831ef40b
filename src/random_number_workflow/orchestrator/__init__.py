"""Local-first orchestration components.

Provides:
- Settings loaded from .env
- Structured logging
- A small CLI surface
- The workflow package (definition, executor, renderer)
"""
