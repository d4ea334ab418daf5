"""Shell engine: syntax checks, tokenizing, command tables and execution of pipelines."""

__version__ = "0.1.0"

__all__ = ["commands", "environment", "executor", "lexer", "quoting", "tokens"]