"""
Formatting state and the extraction command loop.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from rich.color import ColorSystem
from rich.style import Style

from xtract.core.types import OpType
from xtract.document.node import XMLNode
from xtract.exceptions import ExecutionError
from xtract.execution.clause import process_clause
from xtract.execution.context import RecordContext
from xtract.parsing.operations import Operation

logger = logging.getLogger(__name__)

COLOR_STYLES = {
    "red": Style(color="red"),
    "grn": Style(color="green"),
    "green": Style(color="green"),
    "blu": Style(color="blue"),
    "blue": Style(color="blue"),
    "blk": Style(color="black"),
    "black": Style(color="black"),
    "bld": Style(bold=True),
    "bold": Style(bold=True),
    "ital": Style(italic=True),
    "italic": Style(italic=True),
    "italics": Style(italic=True),
    "blink": Style(blink=True),
    "flash": Style(blink=True),
}

PLAIN_COLORS = ("-", "reset", "clear")


def parse_color(text: str) -> Style | None:
    """
    Combine comma-separated color and emphasis names into one style.

    Returns:
        The combined style, or None for "-", "reset" and "clear"

    Raises:
        ExecutionError: For an unknown name
    """
    if text in PLAIN_COLORS:
        return None
    style = Style()
    for item in text.split(","):
        if item not in COLOR_STYLES:
            raise ExecutionError(f"Unrecognized color argument '{item}'", value=item)
        style += COLOR_STYLES[item]
    return style


def _nested_tags(text: str) -> tuple[str, str]:
    """Opening and closing tags for a slash-separated tag path."""
    items = text.split("/")
    return "".join(f"<{item}>" for item in items), "".join(f"</{item}>" for item in reversed(items))


@dataclass
class FormatterState:
    """
    Customizations in effect while running one clause of commands.

    Params:
        sep: Separator between values of one command
        pfx: Text written before each command's values
        sfx: Text written after each command's values
        plg: Prologue written once before the next output
        elg: Epilogue written after the clause if anything was output
        lst: Pending epilogue
        default: Value used when a command finds nothing
        reg: Regular expression for -replace
        exp: Replacement for -replace
        col: Tab written before the next output
        lin: Line ending written after the record
        wrp: Output is XML-wrapped, so values are escaped
        style: Terminal style for -color, None for plain output
    """

    sep: str = "\t"
    pfx: str = ""
    sfx: str = ""
    plg: str = ""
    elg: str = ""
    lst: str = ""
    default: str = ""
    reg: str = ""
    exp: str = ""
    col: str = "\t"
    lin: str = "\n"
    wrp: bool = False
    style: Style | None = None

    def paint(self, text: str) -> str:
        if self.style is None or text == "":
            return text
        return self.style.render(text, color_system=ColorSystem.STANDARD)

    def reset(self) -> None:
        self.pfx = ""
        self.sfx = ""
        self.plg = ""
        self.elg = ""
        self.sep = "\t"
        self.wrp = False

    def wrap(self, text: str, variables: dict[str, str]) -> None:
        """Apply a -wrp argument: a tag, a slash-separated tag path or the older comma form."""
        if text in ("", "-"):
            self.reset()
            return

        if "," in text:
            outer, inner = text.split(",", 1)
            if outer != "":
                self.plg = f"<{outer}>"
                self.elg = f"</{outer}>"
            if inner not in ("", "-"):
                self.pfx = f"<{inner}>"
                self.sfx = f"</{inner}>"
                self.sep = self.sfx + self.pfx
            self.wrp = True
            return

        if "/" in text:
            self.pfx, self.sfx = _nested_tags(text)
            self.sep = self.sfx + self.pfx
            self.wrp = True
            return

        if len(text) > 1 and text[0] == "&":
            text = variables.get(text[1:], "")

        self.pfx = f"<{text}>"
        self.sfx = f"</{text}>"
        self.sep = self.sfx + self.pfx
        self.wrp = True

    def enclose(self, text: str, variables: dict[str, str]) -> None:
        """Apply an -enc argument: tags written around the whole clause output."""
        self.plg = ""
        self.elg = ""
        if len(text) > 1 and text[0] == "&":
            text = variables.get(text[1:], "")
        if text not in ("", "-"):
            self.plg, self.elg = _nested_tags(text)


def process_instructions(
    commands: list[Operation],
    curr: XMLNode,
    mask: str,
    tab: str,
    ret: str,
    index: int,
    level: int,
    context: RecordContext,
    accum: Callable[[str], None],
) -> tuple[str, str]:
    """
    Run one clause of extraction and customization commands on a node.

    Params:
        commands: Compiled commands in order
        curr: Node being visited
        mask: Name of the current exploration scope
        tab: Pending tab from earlier output
        ret: Pending line ending from earlier output
        index: Index of the node among its matched siblings
        level: Depth of the node
        context: Per-record runtime state
        accum: Receives output text

    Returns:
        Updated pending tab and line ending

    Raises:
        ExecutionError: For an unrecognized -color argument
    """
    state = FormatterState()
    variables = context.variables

    varname = ""
    is_accum = False

    for operation in commands:
        op = operation.op
        text = operation.value

        if op == OpType.HISTOGRAM:
            txt, ok = process_clause(
                curr, operation.steps, mask, "", FormatterState(wrp=state.wrp), op, index, level, context
            )
            if ok:
                accum(txt)

        elif op == OpType.TAB:
            state.col = text
        elif op == OpType.RET:
            state.lin = text
        elif op == OpType.PFX:
            state.pfx = text
        elif op == OpType.SFX:
            state.sfx = text
        elif op == OpType.SEP:
            state.sep = text

        elif op in (OpType.TAG, OpType.LBL):
            if op == OpType.TAG:
                state.wrp = True
            accum(tab)
            accum(state.plg)
            accum(state.pfx)
            accum(state.paint(text))
            accum(state.sfx)
            state.plg = ""
            state.lst = state.elg
            tab = state.col
            ret = state.lin

        elif op == OpType.PFC:
            state.pfx = text
            tab = ""
        elif op == OpType.CLR:
            tab = ""
        elif op == OpType.DEQ:
            tab = text
        elif op == OpType.PLG:
            state.plg = text
        elif op == OpType.ELG:
            state.elg = text
        elif op == OpType.WRP:
            state.wrap(text, variables)
        elif op == OpType.ENC:
            state.enclose(text, variables)
        elif op == OpType.RST:
            state.reset()
            state.default = ""
        elif op == OpType.DEF:
            state.default = text
        elif op == OpType.REG:
            state.reg = text
        elif op == OpType.EXP:
            state.exp = text
        elif op == OpType.COLOR:
            state.style = parse_color(text)

        elif op == OpType.ACCUMULATOR:
            is_accum = True
            varname = text
        elif op == OpType.VARIABLE:
            is_accum = False
            varname = text

        elif op == OpType.VALUE:
            if len(text) > 1 and text[0] == "(" and text[-1] == ")":
                # literal value; "()" sets an empty but present variable
                variables[varname] = text[1:-1]
            elif text == "":
                variables.pop(varname, None)
            else:
                txt, ok = process_clause(curr, operation.steps, mask, "", state, op, index, level, context)
                if ok:
                    state.plg = ""
                    state.lst = state.elg
                    if is_accum and variables.get(varname, "") != "":
                        variables[varname] += state.sep + txt
                    else:
                        variables[varname] = txt
            varname = ""
            is_accum = False

        else:
            txt, ok = process_clause(curr, operation.steps, mask, tab, state, op, index, level, context)
            if ok:
                state.plg = ""
                state.lst = state.elg
                tab = state.col
                ret = state.lin
                accum(state.paint(txt))

    accum(state.paint(state.lst))

    return tab, ret
