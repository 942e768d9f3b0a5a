"""Sync pipeline — bring a ChromeOS or ARC checkout to a requested version.

This package provides:
- Executor: manifest preparation and ``repo sync`` invocation for one tree
- Mirror: refreshing an optional reference mirror before it seeds a clone
- Orchestrator: the fail-fast sequence that ties detection, version
  resolution, the mirror, and the primary sync together
"""
