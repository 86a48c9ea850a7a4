"""Infrastructure layer - persistence, exchange connectors, messaging."""
