"""Record descriptors written as data (YAML) instead of Python classes."""
from .template_compiler import (
    FieldSpec,
    SectionSpec,
    TemplateMeta,
    compile_template,
    parse_template,
    register_template,
)

__all__ = [
    "FieldSpec",
    "SectionSpec",
    "TemplateMeta",
    "compile_template",
    "parse_template",
    "register_template",
]
