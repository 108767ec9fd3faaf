"""
Reconciliation engine: scanning, state building, decisions, planning and execution.
"""
