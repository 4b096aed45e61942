"""
Warehouse inventory.

Models:
- InventoryItem (a chemical, fertilizer or other consumable with stock-on-hand)
- InventoryMovement (append-only journal of every ledger debit/credit)
"""
