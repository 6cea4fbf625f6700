"""Configuration, path helpers and the singleton guard."""
