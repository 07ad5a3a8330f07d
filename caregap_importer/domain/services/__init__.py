"""Pure services of the import pipeline: mapping, transform, validation, diff."""
