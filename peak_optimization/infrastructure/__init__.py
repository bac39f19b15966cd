"""
Infrastructure module: shared tariff infrastructure.
"""
