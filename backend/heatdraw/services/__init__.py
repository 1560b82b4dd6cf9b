"""
Services Layer

- bracket_rules / bracket_generator / structure_estimator: pure functions,
  no database or HTTP objects, same input -> same output
- heat_store: the only service that writes; takes a Session and rows
  produced by bracket_generator
"""
