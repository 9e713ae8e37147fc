"""CouchDB source - database discovery and document extraction.

Key entry points:
  - discovery.list_databases()    - _all_dbs minus system databases
  - extraction.extract_snapshot() - concurrent _all_docs per database
"""
