"""FuelEU Compliance Ledger backend."""
