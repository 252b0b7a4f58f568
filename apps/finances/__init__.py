"""Finances app: payment provider client, webhook reconciliation and refunds."""
