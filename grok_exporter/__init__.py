"""Configuration model for grok_exporter."""
