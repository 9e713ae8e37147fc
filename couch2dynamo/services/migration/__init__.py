"""Migration pipeline: sanitized documents loaded into fresh tables.

Key entry points:
  - sanitizer.sanitize()             - key rewriting + empty-value nulling
  - loader.load_database()           - provision one table, insert its documents
  - orchestrator.run_migration()     - enumerate → extract → load everything
"""
