"""Cross-cutting infrastructure: settings, logging and database plumbing."""
