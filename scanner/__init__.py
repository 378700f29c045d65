"""Scanner module for listing parsing, marker collection and import resolution."""

from .discovery import iter_files
from .disassembler import CompileError, Disassembler, LuacDisassembler
from .parser import iter_records, parse_listing
from .markers import MarkerNames, collect_markers
from .resolver import ImportResolver, locate, search_path_templates

__all__ = [
    "iter_files",
    "CompileError",
    "Disassembler",
    "LuacDisassembler",
    "iter_records",
    "parse_listing",
    "MarkerNames",
    "collect_markers",
    "ImportResolver",
    "locate",
    "search_path_templates",
]
