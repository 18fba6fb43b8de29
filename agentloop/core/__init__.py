"""Cross-cutting infrastructure: settings and logging configuration."""
