"""bambootray core: polling, diffing, aggregation and the engine that wires them."""
