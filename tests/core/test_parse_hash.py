"""Fragment Parser — tests for the hash grammar and its degrade paths.

Tests cover:
    - Empty input and bare '#' yield no commands
    - Well-formed tokens, with and without leading '#'
    - Colon-segment count other than 3 drops the token, neighbours unaffected
    - Unknown methods are dropped
    - URI-encoded JSON args decode; malformed args warn once and yield {}
    - Only the first '?' splits command from args
"""

import logging
from urllib.parse import quote

import pytest

from hash_commands.core.hash_command import HashCommand
from hash_commands.core.parse_hash import (
    decode_args,
    parse_hash,
    parse_token,
    uri_decode,
)

METHODS = {"e:run", "e:route"}


class _Sink:
    """Collects diagnostic sink calls."""

    def __init__(self):
        self.calls = []

    def __call__(self, message, error):
        self.calls.append((message, error))


# ─── parse_hash ──────────────────────────────────────────────────

@pytest.mark.parametrize("raw", ["", None, "#"])
def test_empty_input_yields_no_commands(raw):
    assert parse_hash(raw, METHODS) == ()


def test_single_token_without_args():
    assert parse_hash("#e:run:foo", METHODS) == (
        HashCommand(method="e:run", command="foo", args={}),
    )


def test_leading_hash_is_optional():
    assert parse_hash("e:run:foo", METHODS) == parse_hash("#e:run:foo", METHODS)


def test_only_one_leading_hash_is_stripped():
    # "#e" is then the namespace, which is not a registered method
    assert parse_hash("##e:run:foo", METHODS) == ()


def test_order_is_preserved():
    commands = parse_hash("#e:run:foo&e:route:bar&e:run:baz", METHODS)
    assert [(c.method, c.command) for c in commands] == [
        ("e:run", "foo"), ("e:route", "bar"), ("e:run", "baz"),
    ]


@pytest.mark.parametrize("token", [
    "e:run", "run", "e:run:foo:extra", "a:b:c:d:e", "",
])
def test_wrong_segment_count_dropped_neighbours_kept(token):
    commands = parse_hash(f"#e:run:first&{token}&e:route:last", METHODS)
    assert [c.command for c in commands] == ["first", "last"]


def test_unknown_method_dropped():
    assert parse_hash("#x:y:z", METHODS) == ()


def test_method_match_is_exact():
    assert parse_hash("#E:RUN:foo&e:run :foo", METHODS) == ()


def test_uri_encoded_json_args():
    raw = "#e:run:some-action?%7B%22x%22%3A1%7D"
    (cmd,) = parse_hash(raw, METHODS)
    assert cmd.method == "e:run"
    assert cmd.command == "some-action"
    assert cmd.args == {"x": 1}


def test_args_round_trip_through_quote():
    payload = '{"x":1,"nested":{"list":[1,"two",null]},"text":"a b&c"}'
    (cmd,) = parse_hash(f"#e:route:bar?{quote(payload, safe='')}", METHODS)
    assert cmd.args == {"x": 1, "nested": {"list": [1, "two", None]}, "text": "a b&c"}


def test_unencoded_json_args_accepted():
    (cmd,) = parse_hash('#e:run:foo?{"x":1}', METHODS)
    assert cmd.args == {"x": 1}


def test_empty_args_suffix_treated_as_missing():
    sink = _Sink()
    (cmd,) = parse_hash("#e:run:foo?", METHODS, sink)
    assert cmd.args == {}
    assert sink.calls == []


@pytest.mark.parametrize("raw_args", [
    "not-json", "%7Bbroken", "%E0%A4%A", "%ZZ", "%FF", "[1,2]", "42", "null",
    "%7B%22x%22%3A1%7D?extra", "%7B%22x%22%3ANaN%7D", '{"x":Infinity}',
    "%7B%22x%22%3A-Infinity%7D",
])
def test_malformed_args_fall_back_to_empty(raw_args):
    sink = _Sink()
    (cmd,) = parse_hash(f"#e:run:foo?{raw_args}", METHODS, sink)
    assert cmd.args == {}
    assert len(sink.calls) == 1
    message, error = sink.calls[0]
    assert "cannot be parsed" in message
    assert isinstance(error, ValueError)


def test_malformed_args_logged_by_default(caplog):
    with caplog.at_level(logging.WARNING, logger="hash_commands.core.parse_hash"):
        (cmd,) = parse_hash("#e:run:foo?garbage", METHODS)
    assert cmd.args == {}
    assert "Hash commands JSON args cannot be parsed" in caplog.text


def test_failing_sink_does_not_escape_parser(caplog):
    def broken_sink(message, error):
        raise RuntimeError("sink down")

    with caplog.at_level(logging.ERROR, logger="hash_commands.core.parse_hash"):
        commands = parse_hash("#e:run:foo?bad&e:route:bar", METHODS, broken_sink)
    assert [(c.command, c.args) for c in commands] == [("foo", {}), ("bar", {})]
    assert "Diagnostic sink failed" in caplog.text


def test_finite_numbers_still_decode():
    (cmd,) = parse_hash('#e:run:foo?{"x":1.5e3,"y":-2}', METHODS)
    assert cmd.args == {"x": 1500.0, "y": -2}


def test_malformed_args_do_not_affect_other_tokens():
    sink = _Sink()
    commands = parse_hash(
        "#e:run:foo?garbage&e:route:bar?%7B%22y%22%3A2%7D", METHODS, sink,
    )
    assert [c.args for c in commands] == [{}, {"y": 2}]


def test_dropped_tokens_never_decode_args():
    sink = _Sink()
    assert parse_hash("#x:y:z?garbage&e:run?garbage", METHODS, sink) == ()
    assert sink.calls == []


def test_method_table_may_be_a_mapping():
    table = {"e:run": object()}
    assert len(parse_hash("#e:run:foo&e:route:bar", table)) == 1


# ─── helpers ─────────────────────────────────────────────────────

def test_parse_token_returns_none_for_non_command():
    assert parse_token("e:run", METHODS) is None


def test_uri_decode_rejects_truncated_escape():
    with pytest.raises(ValueError):
        uri_decode("%7")


def test_uri_decode_keeps_plus_sign():
    assert uri_decode("a+b%20c") == "a+b c"


def test_decode_args_none_is_empty_object():
    assert decode_args(None) == {}
