"""
Expense Tracker - Client-side state engine

Holds a cached collection of expenses from a remote collection service,
derives filtered and selected views of it, and mints and persists
report summaries from user selections.

DESIGN PRINCIPLES:
1. The store is the single source of truth
2. No optimistic writes: the server confirms before local state changes
3. Previous good state survives every failure
4. Every state transition is logged
5. Collaborators (remote collection, key-value storage) are swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
