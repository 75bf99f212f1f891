"""Configuration constants.

Values that are part of the PHP language or of the on-disk config layout
and therefore not user-configurable. For configurable values, see models.py.
"""

CONFIG_DIR_NAME = ".phpscope"
"""Per-project configuration directory."""

CONFIG_FILE_NAME = "config.yaml"
"""Configuration file inside CONFIG_DIR_NAME."""

ENV_PREFIX = "PHPSCOPE__"
"""Environment variable prefix for settings overrides."""

NAMESPACE_SEPARATOR = "\\"
"""PHP namespace separator."""

PHP_GRAMMAR_MODULE = "tree_sitter_php"
"""Python module shipping the PHP tree-sitter grammar."""

PHP_LANGUAGE_FUNC = "language_php"
"""Grammar entry point accepting inline HTML around PHP tags."""
