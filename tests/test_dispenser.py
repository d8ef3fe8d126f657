import pytest

from cachedirective.dispenser import Dispenser, DispenserError, tokenize


def _walk(dispenser):
    """Collect each top-level directive of the first block with its arguments."""
    found = {}
    dispenser.next()
    level = dispenser.nesting()
    while dispenser.next_block(level):
        found[dispenser.val()] = dispenser.remaining_args()
    return found


def test_tokenize_words_and_braces():
    tokens = tokenize("cache {\n  ttl 10s\n}")
    assert [token.text for token in tokens] == ["cache", "{", "ttl", "10s", "}"]
    assert [token.line for token in tokens] == [1, 1, 2, 2, 3]


def test_tokenize_keeps_placeholders_in_one_token():
    tokens = tokenize("template {method}-{host}-{path}-WITH_SUFFIX")
    assert [token.text for token in tokens] == ["template", "{method}-{host}-{path}-WITH_SUFFIX"]


def test_tokenize_quoted_strings():
    tokens = tokenize('exclude ".*handled"\nrespond "Hello, \\"you\\"!"')
    assert [token.text for token in tokens] == ["exclude", ".*handled", "respond", 'Hello, "you"!']


def test_tokenize_backticks_are_raw():
    tokens = tokenize(r"value `a \" b`")
    assert tokens[1].text == r"a \" b"


def test_tokenize_skips_comments():
    tokens = tokenize("# leading comment\nttl 10s # trailing\nstale 5s")
    assert [token.text for token in tokens] == ["ttl", "10s", "stale", "5s"]


def test_tokenize_empty_quoted_string_is_a_token():
    assert [token.text for token in tokenize('name ""')] == ["name", ""]


def test_tokenize_unterminated_quote_raises():
    with pytest.raises(DispenserError):
        tokenize('exclude "never closed')


def test_val_before_first_token_is_empty():
    dispenser = Dispenser("cache")
    assert dispenser.val() == ""
    assert dispenser.next() is True
    assert dispenser.val() == "cache"
    assert dispenser.next() is False


def test_walk_nested_block():
    dispenser = Dispenser(
        "cache {\n  api {\n    basepath /api\n    souin\n  }\n  ttl 10s\n}"
    )
    dispenser.next()
    outer = dispenser.nesting()
    seen = []
    inner_items = []
    while dispenser.next_block(outer):
        directive = dispenser.val()
        seen.append(directive)
        if directive == "api":
            inner = dispenser.nesting()
            assert inner == outer + 1
            while dispenser.next_block(inner):
                inner_items.append((dispenser.val(), dispenser.remaining_args()))
        else:
            inner_items.append((directive, dispenser.remaining_args()))
    assert seen == ["api", "ttl"]
    assert inner_items == [("basepath", ["/api"]), ("souin", []), ("ttl", ["10s"])]
    assert dispenser.nesting() == outer


def test_remaining_args_stop_at_block_opening():
    dispenser = Dispenser("key arg {\n}")
    dispenser.next()
    assert dispenser.remaining_args() == ["arg"]
    assert dispenser.next_block(0) is False


def test_next_block_without_block_returns_false():
    dispenser = Dispenser("cache\nttl 10s")
    dispenser.next()
    assert dispenser.next_block(0) is False
    assert dispenser.next() is True
    assert dispenser.val() == "ttl"


def test_remaining_args_do_not_cross_lines():
    dispenser = Dispenser("headers A B\nnext C")
    dispenser.next()
    assert dispenser.remaining_args() == ["A", "B"]
    dispenser.next()
    assert dispenser.val() == "next"


def test_error_carries_current_line():
    dispenser = Dispenser("cache {\n  bad\n}")
    dispenser.next()
    dispenser.next_block(0)
    error = dispenser.error("unsupported root directive: bad")
    assert isinstance(error, DispenserError)
    assert error.line == 2
    assert error.message == "unsupported root directive: bad"
    assert "unsupported root directive: bad" in str(error)