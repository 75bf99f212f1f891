"""phpscope - declarations and scopes of PHP source files."""

from phpscope.reflection import ReflectionFile, ReflectionFlag

__version__ = "0.1.0"

__all__ = ["ReflectionFile", "ReflectionFlag", "__version__"]
