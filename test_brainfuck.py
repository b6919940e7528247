from __future__ import annotations

import pytest

from brainfuck import (BrainfuckSyntaxError, DecrementPointer, DecrementValue, IncrementPointer, IncrementValue, Loop,
                       MismatchedParentheses, Program, Read, Token, UnmatchedLoopBegin, UnmatchedLoopEnd, Write, lex)

all_tokens = [
    Token.WRITE,
    Token.READ,
    Token.INCREMENT_VALUE,
    Token.DECREMENT_VALUE,
    Token.INCREMENT_POINTER,
    Token.DECREMENT_POINTER,
    Token.LOOP_BEGIN,
    Token.LOOP_END,
]


def test_all_symbols():
    assert lex(b".,+-><[]") == all_tokens


def test_permissive_drops_other_bytes():
    assert lex(b".123,123+sdf-v>a<bet[wrg]sg") == all_tokens


def test_permissive_keeps_only_symbols():
    source = bytes(range(256))
    tokens = lex(source)
    assert [t.value for t in tokens] == [b for b in source if b in b"><+-.,[]"]


def test_strict_accepts_whitespace_and_comments():
    source = b"// add two\n++ \t>\r\n// trailing comment without newline"
    assert lex(source, strict=True) == [Token.INCREMENT_VALUE, Token.INCREMENT_VALUE, Token.INCREMENT_POINTER]


def test_strict_rejects_other_bytes():
    with pytest.raises(BrainfuckSyntaxError) as info:
        lex(b"+ +a", strict=True)
    assert info.value.byte == ord("a")
    assert info.value.offset == 3
    assert isinstance(info.value, ValueError)


def test_strict_single_slash_is_an_error():
    with pytest.raises(BrainfuckSyntaxError) as info:
        lex(b"+/+", strict=True)
    assert info.value.offset == 1


def test_parse_flat():
    assert Program.from_source(b"><+-.,") == (
        IncrementPointer(), DecrementPointer(), IncrementValue(), DecrementValue(), Write(), Read(),
    )


def test_parse_nested_loops():
    assert Program.from_source(b"+[>[-]<-].") == (
        IncrementValue(),
        Loop((IncrementPointer(), Loop((DecrementValue(),)), DecrementPointer(), DecrementValue())),
        Write(),
    )


def test_parse_empty_loop():
    assert Program.from_source(b"[]") == (Loop(()),)


def test_parse_is_deterministic():
    tokens = lex(b"+++++++[>++[>+++++<-]<-]>>++<++<+")
    assert Program.from_tokens(tokens) == Program.from_tokens(tokens)


@pytest.mark.parametrize("source, offset", [
    (b"]", 0),
    (b"+]", 1),
    (b"[]]", 2),
    (b"][", 0),
])
def test_unmatched_loop_end(source, offset):
    with pytest.raises(UnmatchedLoopEnd) as info:
        Program.from_source(source)
    assert info.value.offset == offset


@pytest.mark.parametrize("source, offset", [
    (b"[", 0),
    (b"+[[]", 1),
    (b"[][[", 2),
    (b"[[[]]", 0),
])
def test_unmatched_loop_begin(source, offset):
    with pytest.raises(UnmatchedLoopBegin) as info:
        Program.from_source(source)
    assert info.value.offset == offset


def test_offsets_count_tokens_not_bytes():
    with pytest.raises(UnmatchedLoopEnd) as info:
        Program.from_source(b"comment + ]")
    assert info.value.offset == 1
    assert isinstance(info.value, MismatchedParentheses)


def test_deep_nesting():
    depth = 5000
    program = Program.from_source(b"[" * depth + b"]" * depth)
    assert len(program) == 1
    node = program[0]
    for _ in range(depth - 1):
        node = node.body[0]
    assert node.body == ()
