# barter/services/__init__.py
# Business logic: swap request engine, conversation store, rating ledger, sync.
