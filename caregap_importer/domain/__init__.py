"""Domain layer: care-gap entities and pure pipeline services."""
