"""Answer-shape compilation."""

from gemini_structured.schema.compiler import (
    CompiledField,
    CompiledOption,
    OptionSet,
    compile_option,
    compile_options,
    option_name,
)

__all__ = [
    "CompiledField",
    "CompiledOption",
    "OptionSet",
    "compile_option",
    "compile_options",
    "option_name",
]
