"""Lexer for `luac -l` instruction listings."""

import re
from typing import Iterable, Iterator, List, Optional

from report.model import MAIN_CHUNK, WILDCARD, InstructionRecord, RecordKind


# main <examples/xhtml2wiki.lua:0,0> (64 instructions, 256 bytes at 0x805c1a0)
# function <examples/xhtml2wiki.lua:13,20> (6 instructions, 24 bytes at 0x805c438)
FUNCTION_RE = re.compile(r"^\s*(?P<word>\w+)\s+<(?P<context>[^>]+)>")

#   69  [54]  GETGLOBAL  21 -23  ; lint_ignore
#    2  [1]   LOADK       1 -2   ; "lazytree"
#    2  [1]   GETTABUP    0 0 0  ; _ENV "print"
INSTRUCTION_RE = re.compile(
    r"^\s*(?P<index>\d+)\s+\[(?P<line>\d+|-)\]\s+(?P<op>[A-Z_]+)\b(?P<operands>.*)$"
)

STRING_ANNOTATION_RE = re.compile(r'^"(?P<value>.*)"$')
ENV_ANNOTATION_RE = re.compile(r'^_ENV\s+"(?P<name>[^"]*)"')

# luac prints string constants with C escapes: \" \\ \n ... and \ddd (decimal)
ESCAPE_RE = re.compile(r"\\(\d{1,3}|.)")
SIMPLE_ESCAPES = {
    "a": "\a", "b": "\b", "f": "\f", "n": "\n",
    "r": "\r", "t": "\t", "v": "\v",
}

GLOBAL_READ_OPS = {"GETGLOBAL"}
GLOBAL_WRITE_OPS = {"SETGLOBAL"}
ENV_READ_OPS = {"GETTABUP"}
ENV_WRITE_OPS = {"SETTABUP"}
CONSTANT_OPS = {"LOADK"}


def _annotation(operands: str) -> Optional[str]:
    """Return the text after the first ';' of an operand field, if any."""
    if ";" not in operands:
        return None
    return operands.split(";", 1)[1].strip()


def _unescape(text: str) -> str:
    """Undo the escaping luac applies to string constants."""

    def _replace(match: "re.Match[str]") -> str:
        escape = match.group(1)
        if escape.isdigit():
            return chr(int(escape))
        return SIMPLE_ESCAPES.get(escape, escape)

    return ESCAPE_RE.sub(_replace, text)


def _global_name(op: str, annotation: str) -> Optional[str]:
    """
    Extract the global symbol name accessed by an instruction.

    Lua 5.1 names the global directly (`; name`); Lua 5.2+ indexes the
    `_ENV` upvalue with a quoted key (`; _ENV "name"`).
    """
    if op in GLOBAL_READ_OPS or op in GLOBAL_WRITE_OPS:
        return annotation or None
    match = ENV_ANNOTATION_RE.match(annotation)
    if match:
        return match.group("name")
    return None


def classify_line(line: str, function: str) -> Optional[InstructionRecord]:
    """
    Classify a single listing line.

    Args:
        line: Raw listing line.
        function: Id of the function the line belongs to.

    Returns:
        An InstructionRecord, or None for lines that carry no fact of
        interest (headers, other opcodes, wildcard accesses).
    """
    boundary = FUNCTION_RE.match(line)
    if boundary:
        context = boundary.group("context")
        if boundary.group("word") == "main":
            context = MAIN_CHUNK
        return InstructionRecord(RecordKind.FUNCTION_BOUNDARY, 0, context, context)

    match = INSTRUCTION_RE.match(line)
    if not match:
        return None

    op = match.group("op")
    annotation = _annotation(match.group("operands"))
    if annotation is None:
        return None

    index = int(match.group("index"))
    lineno = match.group("line")
    lineno = 0 if lineno == "-" else int(lineno)

    if op in CONSTANT_OPS:
        constant = STRING_ANNOTATION_RE.match(annotation)
        if not constant:
            return None
        return InstructionRecord(
            RecordKind.CONSTANT_LOAD, lineno, function, _unescape(constant.group("value")), index
        )

    if op in GLOBAL_READ_OPS or op in ENV_READ_OPS:
        kind = RecordKind.GLOBAL_READ
    elif op in GLOBAL_WRITE_OPS or op in ENV_WRITE_OPS:
        kind = RecordKind.GLOBAL_WRITE
    else:
        return None

    name = _global_name(op, annotation)
    if name is None or name == WILDCARD:
        return None
    return InstructionRecord(kind, lineno, function, name, index)


def iter_records(lines: Iterable[str]) -> Iterator[InstructionRecord]:
    """
    Lazily turn listing lines into instruction records.

    Args:
        lines: Lines of a `luac -l` listing.

    Yields:
        InstructionRecord objects in listing order.
    """
    function = MAIN_CHUNK
    for line in lines:
        record = classify_line(line, function)
        if record is None:
            continue
        if record.kind is RecordKind.FUNCTION_BOUNDARY:
            function = record.payload
        yield record


def parse_listing(text: str) -> List[InstructionRecord]:
    """Parse a complete listing into a list of records."""
    return list(iter_records(text.splitlines()))
