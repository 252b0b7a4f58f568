"""Analytics app: admin revenue reporting over the booking ledger."""
