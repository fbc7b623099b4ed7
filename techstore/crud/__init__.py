"""Storage access for catalog and ledger tables"""
