"""Core building blocks: errors, logging, documents and HTTP clients."""
