"""
Operation model and clause builders.

An Operation is one compiled command together with the Steps it operates
on. Conditional clauses (-if, -unless, -and, ...) and extraction clauses
(-element, -sum, -pfx, ...) are compiled separately because their token
grammars differ: conditionals strictly alternate command and value, while
extraction commands may absorb any number of following items.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from xtract.core.tokens import ARGUMENT_TYPES, parse_flag
from xtract.core.types import ArgumentType, OpType
from xtract.exceptions import (
    CommandParseError,
    ConditionSyntaxError,
    MisplacedCommandError,
    MissingArgumentError,
    UnrecognizedArgumentError,
)
from xtract.parsing.steps import (
    Step,
    build_condition_step,
    build_element_constraint,
    build_extraction_steps,
)
from xtract.text.normalize import (
    convert_slash,
    remove_comma_or_semicolon,
    sort_string_by_words,
)

if TYPE_CHECKING:
    from xtract.parsing.blocks import Block

# Commands that may open a conditional clause
CLAUSE_OPENERS = frozenset({"-if", "-unless", "-select", "-match", "-avoid", "-position"})

# Customization commands that store their argument verbatim (after slash conversion)
SIMPLE_CUSTOMIZATIONS = frozenset(
    {
        OpType.TAB,
        OpType.RET,
        OpType.PFX,
        OpType.SFX,
        OpType.SEP,
        OpType.LBL,
        OpType.PFC,
        OpType.DEQ,
        OpType.PLG,
        OpType.ELG,
        OpType.WRP,
        OpType.ENC,
        OpType.DEF,
        OpType.REG,
        OpType.EXP,
        OpType.COLOR,
    }
)

# Customization commands that take one argument
ARGUMENT_CUSTOMIZATIONS = SIMPLE_CUSTOMIZATIONS | {
    OpType.TAG,
    OpType.ATT,
    OpType.ATR,
    OpType.END,
    OpType.FWD,
    OpType.AWD,
    OpType.PKG,
}

STRING_MATCHES = frozenset(
    {
        OpType.EQUALS,
        OpType.CONTAINS,
        OpType.INCLUDES,
        OpType.ISWITHIN,
        OpType.STARTSWITH,
        OpType.ENDSWITH,
        OpType.ISNOT,
        OpType.ISBEFORE,
        OpType.ISAFTER,
        OpType.MATCHES,
        OpType.RESEMBLES,
    }
)

NUMERIC_MATCHES = frozenset(
    {OpType.GT, OpType.GE, OpType.LT, OpType.LE, OpType.EQ, OpType.NE}
)


@dataclass
class Operation:
    """
    One compiled command and its operand Steps.

    For conditional tests the first Step addresses the tested content and an
    optional second Step carries the comparison constraint.
    """

    op: OpType
    value: str = ""
    steps: list[Step] = field(default_factory=list)

    def describe(self) -> str:
        """Return a one-line summary used by the debug dump."""
        text = f"{self.op.value} '{self.value}'"
        if self.steps:
            text += " [" + ", ".join(f"{step.op.value}:{step.value}" for step in self.steps) + "]"
        return text


def _strip_protecting_backslash(text: str) -> str:
    """A leading backslash protects a value that starts with a dash."""
    if len(text) > 1 and text[0] == "\\":
        return text[1:]
    return text


def parse_conditionals(block: "Block", tokens: list[str]) -> list[Operation]:
    """
    Compile a conditional clause.

    Params:
        block: Block receiving any -position policy
        tokens: Alternating command and value tokens

    Returns:
        Conditions in command-line order

    Raises:
        CommandParseError: For any grammar violation
    """
    if not tokens:
        return []

    first = tokens[0]
    if first not in CLAUSE_OPENERS:
        raise ConditionSyntaxError(f"Missing -if command before '{first}'", token=first)
    if first == "-position" and len(tokens) > 2:
        raise ConditionSyntaxError("Cannot combine -position with -if or -unless commands", token=first)

    final = tokens[-1]
    if final.startswith("-"):
        if parse_flag(final)[0] == OpType.UNRECOGNIZED:
            raise UnrecognizedArgumentError(final)
        raise MissingArgumentError(final)

    conditions: list[Operation] = []
    current: Operation | None = None

    # colon separates element from value only after -match or -avoid
    element_colon_value = False

    status = OpType.UNSET
    expect_dash = True
    last = ""
    num_if = 0
    num_unless = 0
    last_cond = ""

    def open_test(op: OpType, text: str) -> Operation:
        operation = Operation(op, text, build_condition_step(text, element_colon_value))
        conditions.append(operation)
        return operation

    for token in tokens:
        if expect_dash:
            if not token.startswith("-"):
                raise ConditionSyntaxError(f"Unexpected '{token}' argument after '{last}'", token=token)
        elif token.startswith("-"):
            raise ConditionSyntaxError(f"Unexpected '{token}' command after '{last}'", token=token)
        expect_dash = not expect_dash
        last = token

        if status == OpType.UNSET:
            status, _ = parse_flag(token)
            if status == OpType.UNRECOGNIZED:
                raise UnrecognizedArgumentError(token)
            if status not in (
                OpType.POSITION,
                OpType.MATCH,
                OpType.AVOID,
                OpType.IF,
                OpType.UNLESS,
                OpType.SELECT,
                OpType.AND,
                OpType.OR,
            ) and status not in STRING_MATCHES | NUMERIC_MATCHES | {
                OpType.ISEQUALTO,
                OpType.DIFFERSFROM,
            }:
                raise CommandParseError(f"Unexpected argument '{token}'", token=token)
            continue

        if status == OpType.POSITION:
            if block.position:
                raise ConditionSyntaxError(
                    f"-position '{token}' conflicts with existing '{block.position}'", token=token
                )
            block.position = token

        elif status in (OpType.MATCH, OpType.AVOID, OpType.IF):
            if status != OpType.IF:
                element_colon_value = True
            num_if += 1
            if num_if > 1 or num_unless > 0:
                raise ConditionSyntaxError(f"Unexpected '-if {token}' after '{last_cond}'", token=token)
            last_cond = "-if " + token
            current = open_test(status, token)

        elif status == OpType.UNLESS:
            num_unless += 1
            if num_unless > 1 or num_if > 0:
                raise ConditionSyntaxError(f"Unexpected '-unless {token}' after '{last_cond}'", token=token)
            last_cond = "-unless " + token
            current = open_test(status, token)

        elif status in (OpType.SELECT, OpType.AND, OpType.OR):
            current = open_test(status, token)

        elif status in STRING_MATCHES:
            if current is None:
                raise ConditionSyntaxError("Unexpected adjacent string match constraints", token=token)
            text = _strip_protecting_backslash(token)
            if status == OpType.MATCHES:
                text = remove_comma_or_semicolon(text)
            elif status == OpType.RESEMBLES:
                text = sort_string_by_words(text)
            current.steps.append(Step(op=status, value=text))
            current = None

        elif status in (OpType.ISEQUALTO, OpType.DIFFERSFROM):
            if current is not None:
                current.steps.append(build_element_constraint(status, token, numeric=False))
                current = None

        elif status in NUMERIC_MATCHES:
            if current is None:
                raise ConditionSyntaxError("Unexpected adjacent numeric match constraints", token=token)
            text = _strip_protecting_backslash(token)
            if text == "":
                raise ConditionSyntaxError("Empty numeric match constraints", token=token)
            if text[0].isdigit() or text[0] in "-+":
                current.steps.append(Step(op=status, value=text))
            else:
                current.steps.append(build_element_constraint(status, text, numeric=True))
            current = None

        status = OpType.UNSET

    return conditions


def _trailing_flag_allowed(tokens: list[str]) -> bool:
    """Decide whether a clause may end in a token that starts with a dash."""
    final = tokens[-1]
    if final in ("-clr", "-cls", "-slf"):
        return True
    if len(tokens) < 2:
        return False
    # the dash is the literal argument of a customization command
    previous, _ = parse_flag(tokens[-2])
    if previous in ARGUMENT_CUSTOMIZATIONS:
        return True
    if len(tokens) > 2 and tokens[-3] in ("-att", "-atr"):
        return True
    return False


def parse_extractions(block: "Block", tokens: list[str], pattern: str) -> list[Operation]:
    """
    Compile an extraction clause.

    Params:
        block: Block receiving -fwd, -awd and -pkg text
        tokens: Extraction and customization tokens
        pattern: Name of the -pattern scope

    Returns:
        Commands in execution order

    Raises:
        CommandParseError: For any grammar violation
    """
    if not tokens:
        return []

    first = tokens[0]
    if not first.startswith("-"):
        raise CommandParseError(f"Missing -element command before '{first}'", token=first)

    final = tokens[-1]
    if final.startswith("-"):
        if final == "-rst":
            raise CommandParseError("Unexpected position for -rst command", token=final)
        if not _trailing_flag_allowed(tokens):
            if parse_flag(final)[0] == OpType.UNRECOGNIZED:
                raise UnrecognizedArgumentError(final)
            raise MissingArgumentError(final)

    commands: list[Operation] = []

    def add(op: OpType, value: str = "") -> Operation:
        operation = Operation(op, value)
        commands.append(operation)
        return operation

    def add_with_steps(op: OpType, value: str) -> None:
        operation = add(op, value)
        operation.steps = build_extraction_steps(op, value, pattern)

    def next_status(token: str) -> tuple[OpType, bool]:
        status, is_extraction = parse_flag(token)

        if status == OpType.VARIABLE:
            add(status, token[1:])
            return OpType.VALUE, False
        if status == OpType.ACCUMULATOR:
            add(status, token[2:])
            return OpType.VALUE, False
        if status in (OpType.CLR, OpType.RST):
            add(status)
            return OpType.UNSET, False
        if status == OpType.CLS:
            add(OpType.LBL, ">")
            return OpType.UNSET, False
        if status == OpType.SLF:
            add(OpType.LBL, " />")
            return OpType.UNSET, False
        if status == OpType.UNSET:
            raise CommandParseError(f"No -element before '{token}'", token=token)
        if status == OpType.UNRECOGNIZED:
            raise UnrecognizedArgumentError(token)
        if status in ARGUMENT_CUSTOMIZATIONS or is_extraction:
            return status, is_extraction
        raise MisplacedCommandError(token)

    status = OpType.UNSET
    is_extraction = False
    idx = 0
    count = len(tokens)

    while idx < count:
        token = tokens[idx]
        idx += 1

        if ARGUMENT_TYPES.get(token) == ArgumentType.CONDITIONAL:
            raise MisplacedCommandError(token)

        if status == OpType.UNSET:
            status, is_extraction = next_status(token)

        elif status in SIMPLE_CUSTOMIZATIONS:
            add(status, convert_slash(token))
            status = OpType.UNSET

        elif status == OpType.TAG:
            # building a tag from components clears -tab and -sep first
            add(OpType.TAB)
            add(OpType.SEP)
            add(OpType.TAG, "<" + convert_slash(token))
            status = OpType.UNSET

        elif status == OpType.ATT:
            if idx < count:
                value = tokens[idx]
                idx += 1
                if value != "":
                    add(OpType.LBL, f' {convert_slash(token)}="{convert_slash(value)}"')
            status = OpType.UNSET

        elif status == OpType.ATR:
            if idx < count:
                value = tokens[idx]
                idx += 1
                if value != "":
                    add(OpType.LBL, f' {convert_slash(token)}="')
                    add_with_steps(OpType.ELEMENT, value)
                    add(OpType.LBL, '"')
            status = OpType.UNSET

        elif status == OpType.END:
            add(OpType.LBL, f"</{convert_slash(token)}>")
            status = OpType.UNSET

        elif status == OpType.FWD:
            block.foreword = convert_slash(token)
            status = OpType.UNSET

        elif status == OpType.AWD:
            block.afterword = convert_slash(token)
            status = OpType.UNSET

        elif status == OpType.PKG:
            package = convert_slash(token)
            block.foreword = ""
            block.afterword = ""
            if package not in ("", "-"):
                tags = package.split("/")
                block.foreword = "".join(f"<{tag}>" for tag in tags)
                block.afterword = "".join(f"</{tag}>" for tag in reversed(tags))
            status = OpType.UNSET

        elif status == OpType.VALUE:
            add_with_steps(OpType.VALUE, token)
            status = OpType.UNSET

        elif is_extraction:
            # one Operation per argument, even under a single command
            while not token.startswith("-"):
                add_with_steps(status, token)
                if idx >= count:
                    token = ""
                    break
                token = tokens[idx]
                idx += 1
            status = OpType.UNSET
            if token:
                if ARGUMENT_TYPES.get(token) == ArgumentType.CONDITIONAL:
                    raise MisplacedCommandError(token)
                status, is_extraction = next_status(token)

    return commands
