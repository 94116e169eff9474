"""
Cooperative Ledger Settlement Service

Runs the monthly settlement that deducts loan and commodity-order
installments from member savings and reports the outcome.
"""

__version__ = "0.1.0"
