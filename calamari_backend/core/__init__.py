"""Configuration, logging, authentication and API exceptions."""
