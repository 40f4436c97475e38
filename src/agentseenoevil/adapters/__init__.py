"""
Adapters - Load redactor configuration from outside sources.
"""

from .config_file import SUPPORTED_EXTENSIONS, load_config_file, options_from_dict


__all__ = [
    "SUPPORTED_EXTENSIONS",
    "load_config_file",
    "options_from_dict",
]
