"""Request sanitization against NoSQL (MongoDB) operator injection."""

from mongo_sanitize.config.options import SanitizeOptions, resolve_options
from mongo_sanitize.errors import ConfigurationError, MongoSanitizeError
from mongo_sanitize.middleware.mongo_sanitizer import MongoSanitizer, create
from mongo_sanitize.middleware.param_sanitizer import param_dependency, param_handler, path_params_dependency
from mongo_sanitize.patterns import PATTERNS
from mongo_sanitize.sanitizer import sanitize_value

__all__ = [
    "PATTERNS",
    "ConfigurationError",
    "MongoSanitizeError",
    "MongoSanitizer",
    "SanitizeOptions",
    "create",
    "param_dependency",
    "param_handler",
    "path_params_dependency",
    "resolve_options",
    "sanitize_value",
]
