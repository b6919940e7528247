from __future__ import annotations

import logging
import string
from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from frozendict import frozendict

logger = logging.getLogger(__name__)


class BrainfuckError(Exception):
    pass


class BrainfuckSyntaxError(BrainfuckError, ValueError):
    def __init__(self, byte: int, offset: int):
        self.byte = byte
        self.offset = offset
        super(BrainfuckSyntaxError, self).__init__(
            f"Unexpected byte {bytes((byte,))!r} at offset {offset}")


class MismatchedParentheses(BrainfuckError, ValueError):
    def __init__(self, offset: int, message: str):
        self.offset = offset
        super(MismatchedParentheses, self).__init__(message)


class UnmatchedLoopEnd(MismatchedParentheses):
    def __init__(self, offset: int):
        super(UnmatchedLoopEnd, self).__init__(offset, f"Loop ending at {offset} has no beginning")


class UnmatchedLoopBegin(MismatchedParentheses):
    def __init__(self, offset: int):
        super(UnmatchedLoopBegin, self).__init__(offset, f"Loop starting at {offset} has no matching ending")


class Token(Enum):
    INCREMENT_POINTER = ord(">")
    DECREMENT_POINTER = ord("<")
    INCREMENT_VALUE = ord("+")
    DECREMENT_VALUE = ord("-")
    WRITE = ord(".")
    READ = ord(",")
    LOOP_BEGIN = ord("[")
    LOOP_END = ord("]")


symbols: frozendict[int, Token] = frozendict({token.value: token for token in Token})

whitespace = frozenset(string.whitespace.encode())


def lex(source: bytes, strict: bool = False) -> list[Token]:
    """
    Turn source bytes into tokens.

    In permissive mode every byte that is not one of the eight symbols is a comment.
    In strict mode only whitespace and `//` line comments may appear between symbols,
    anything else raises BrainfuckSyntaxError with its offset in `source`.
    """
    source = bytes(source)
    if not strict:
        tokens = [symbols[b] for b in source if b in symbols]
        logger.debug("Lexed %d tokens from %d bytes", len(tokens), len(source))
        return tokens
    tokens = []
    offset = 0
    while offset < len(source):
        byte = source[offset]
        if byte in symbols:
            tokens.append(symbols[byte])
        elif source.startswith(b"//", offset):
            end = source.find(b"\n", offset)
            offset = len(source) if end == -1 else end
            continue
        elif byte not in whitespace:
            raise BrainfuckSyntaxError(byte, offset)
        offset += 1
    logger.debug("Lexed %d tokens from %d bytes (strict)", len(tokens), len(source))
    return tokens


class Instruction(ABC):
    pass


@dataclass(frozen=True)
class IncrementPointer(Instruction):
    pass


@dataclass(frozen=True)
class DecrementPointer(Instruction):
    pass


@dataclass(frozen=True)
class IncrementValue(Instruction):
    pass


@dataclass(frozen=True)
class DecrementValue(Instruction):
    pass


@dataclass(frozen=True)
class Write(Instruction):
    pass


@dataclass(frozen=True)
class Read(Instruction):
    pass


@dataclass(frozen=True)
class Loop(Instruction):
    body: tuple[Instruction, ...]


direct: frozendict[Token, Instruction] = frozendict({
    Token.INCREMENT_POINTER: IncrementPointer(),
    Token.DECREMENT_POINTER: DecrementPointer(),
    Token.INCREMENT_VALUE: IncrementValue(),
    Token.DECREMENT_VALUE: DecrementValue(),
    Token.WRITE: Write(),
    Token.READ: Read(),
})


class Program(tuple[Instruction, ...]):
    __slots__ = ()

    @classmethod
    def from_tokens(cls, tokens: Iterable[Token]) -> Program:
        # Each open loop keeps its token offset and the children collected so far.
        open_loops: list[tuple[int, list[Instruction]]] = []
        out: list[Instruction] = []
        for offset, token in enumerate(tokens):
            current = open_loops[-1][1] if open_loops else out
            match token:
                case Token.LOOP_BEGIN:
                    open_loops.append((offset, []))
                case Token.LOOP_END:
                    if not open_loops:
                        raise UnmatchedLoopEnd(offset)
                    _, body = open_loops.pop()
                    (open_loops[-1][1] if open_loops else out).append(Loop(tuple(body)))
                case _:
                    current.append(direct[token])
        if open_loops:
            raise UnmatchedLoopBegin(open_loops[0][0])
        logger.debug("Parsed %d top-level instructions", len(out))
        return cls(out)

    @classmethod
    def from_source(cls, source: bytes, strict: bool = False) -> Program:
        return cls.from_tokens(lex(source, strict))
