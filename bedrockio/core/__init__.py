"""Configuration and logging helpers shared by the runtime and the CLI."""
