from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, Literal, Optional, Protocol, get_args

from brainfuck import (BrainfuckError, DecrementPointer, DecrementValue, IncrementPointer, IncrementValue,
                       Instruction, Loop, Program, Read, Write)

logger = logging.getLogger(__name__)

MEMORY_SIZE = 30000

PointerWrap = Literal["byte", "tape"]
EofPolicy = Literal["abort", "zero", "unchanged"]


class InputExhausted(BrainfuckError, EOFError):
    def __init__(self, pointer: int):
        self.pointer = pointer
        super(InputExhausted, self).__init__(f"Input exhausted while reading into cell {pointer}")


class OutputFailure(BrainfuckError, OSError):
    pass


class ByteSink(Protocol):
    def write(self, data: bytes, /) -> object: ...

    def flush(self) -> object: ...


class ByteSource(Protocol):
    def read(self, size: int, /) -> Optional[bytes]: ...


@dataclass(frozen=True)
class Settings:
    strict: bool = False
    pointer_wrap: PointerWrap = "byte"
    on_eof: EofPolicy = "abort"

    def __post_init__(self):
        if self.pointer_wrap not in get_args(PointerWrap):
            raise ValueError(f"Unknown pointer_wrap {self.pointer_wrap!r}, expected one of {get_args(PointerWrap)}")
        if self.on_eof not in get_args(EofPolicy):
            raise ValueError(f"Unknown on_eof {self.on_eof!r}, expected one of {get_args(EofPolicy)}")


DEFAULT_SETTINGS = Settings()


@dataclass(slots=True)
class Machine:
    memory: bytearray = field(default_factory=lambda: bytearray(MEMORY_SIZE))
    pointer: int = 0


# A closed file object raises ValueError rather than OSError.
def _write(output: ByteSink, value: int) -> None:
    try:
        output.write(bytes((value,)))
    except (OSError, ValueError) as e:
        logger.warning("Failed to write byte %d: %s", value, e)


def _flush(output: ByteSink) -> None:
    try:
        output.flush()
    except (OSError, ValueError) as e:
        logger.warning("Failed to flush output: %s", e)


def execute(program: Program, machine: Machine, output: ByteSink, input: ByteSource,
            settings: Settings = DEFAULT_SETTINGS) -> None:
    """
    Run `program` against `machine`, mutating its memory and pointer in place.

    With pointer_wrap="byte" the pointer wraps modulo 256 whatever the tape length is,
    so a tape shorter than 256 cells is only safe for programs that stay inside it.
    """
    memory = machine.memory
    match settings.pointer_wrap:
        case "byte":
            modulus = 256
        case "tape":
            modulus = len(memory)
        case wrap:
            raise ValueError(f"Unhandled pointer_wrap {wrap!r}")
    # The root frame has no body to repeat; loop frames restart while their guard cell is non-zero.
    stack: list[tuple[Optional[tuple[Instruction, ...]], Iterator[Instruction]]] = [(None, iter(program))]
    while stack:
        body, instructions = stack[-1]
        instruction = next(instructions, None)
        if instruction is None:
            if body is not None and memory[machine.pointer]:
                stack[-1] = (body, iter(body))
            else:
                stack.pop()
            continue
        match instruction:
            case IncrementPointer():
                machine.pointer = (machine.pointer + 1) % modulus
            case DecrementPointer():
                machine.pointer = (machine.pointer - 1) % modulus
            case IncrementValue():
                memory[machine.pointer] = (memory[machine.pointer] + 1) % 256
            case DecrementValue():
                memory[machine.pointer] = (memory[machine.pointer] - 1) % 256
            case Write():
                _write(output, memory[machine.pointer])
            case Read():
                _flush(output)
                data = input.read(1)
                if data:
                    memory[machine.pointer] = data[0]
                else:
                    match settings.on_eof:
                        case "abort":
                            raise InputExhausted(machine.pointer)
                        case "zero":
                            memory[machine.pointer] = 0
                        case "unchanged":
                            pass
                        case policy:
                            raise ValueError(f"Unhandled on_eof {policy!r}")
            case Loop(children):
                if memory[machine.pointer]:
                    stack.append((children, iter(children)))
            case _:
                raise ValueError(f"Unhandled {instruction}")


def interpret(source: bytes, output: ByteSink, input: ByteSource, settings: Settings = DEFAULT_SETTINGS) -> None:
    program = Program.from_source(source, settings.strict)
    try:
        execute(program, Machine(), output, input, settings)
    finally:
        _flush(output)
