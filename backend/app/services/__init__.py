"""FuelEU Compliance Ledger - Services"""
