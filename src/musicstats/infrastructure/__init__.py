"""Infrastructure adapters: persistence, integrations, messaging, observability."""
