"""Bank Service: accounts, deposits, withdrawals and transfers."""
