"""aipolish — rewrite files in place with an LLM chat-completion endpoint."""

__version__ = "0.1.0"
