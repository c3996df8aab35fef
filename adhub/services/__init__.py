"""Business services: lookups, CSV exchange, import and calendar reconciliation."""
