"""PayDash: signed exchange client and transaction ledger for the payment gateway dashboard."""
