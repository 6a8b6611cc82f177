"""Pure query-shaping and response-shaping helpers."""
