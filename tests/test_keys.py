import pytest

from easye2ee.common.exceptions import KeyFormatError
from easye2ee.crypto.keys import (
    Ciphertext,
    PrivateKey,
    PublicKey,
    parse_ciphertext,
    parse_private_key,
    parse_public_key,
)

P = 1019  # safe prime
G = 2
Y = pow(G, 77, P)


def test_parse_public_key_from_wire() -> None:
    key = parse_public_key({"p": str(P), "g": str(G), "y": str(Y)})
    assert key == PublicKey(p=P, g=G, y=Y)


def test_parse_public_key_accepts_numbers() -> None:
    key = parse_public_key({"p": P, "g": G, "y": Y})
    assert key.p == P


def test_public_key_wire_format() -> None:
    wire = PublicKey(p=P, g=G, y=Y).to_model().to_wire()
    assert wire == {"p": str(P), "g": str(G), "y": str(Y)}
    assert parse_public_key(wire) == PublicKey(p=P, g=G, y=Y)


@pytest.mark.parametrize(
    "data",
    [
        {"p": str(P), "g": str(G)},
        {"p": "abc", "g": str(G), "y": str(Y)},
        {"p": "-7", "g": str(G), "y": str(Y)},
        {"p": str(P * 3), "g": str(G), "y": str(Y)},
        {"p": str(P), "g": "1", "y": str(Y)},
        {"p": str(P), "g": str(P), "y": str(Y)},
        {"p": str(P), "g": str(G), "y": "0"},
        "not a key",
        None,
    ],
)
def test_parse_public_key_rejects_malformed(data) -> None:
    with pytest.raises(KeyFormatError):
        parse_public_key(data)


def test_parse_private_key() -> None:
    assert parse_private_key({"x": "77"}) == PrivateKey(x=77)
    with pytest.raises(KeyFormatError):
        parse_private_key({"x": "0"})
    with pytest.raises(KeyFormatError):
        parse_private_key({})


def test_private_key_repr_hides_secret() -> None:
    assert "123456789" not in repr(PrivateKey(x=123456789))


def test_ciphertext_compact_form() -> None:
    ct = Ciphertext(a=5, b=9, p=P)
    assert ct.to_compact() == f"5;9;{P}"
    assert parse_ciphertext(ct.to_compact()) == ct
    assert parse_ciphertext("5;9") == Ciphertext(a=5, b=9)
    assert parse_ciphertext("5;9;") == Ciphertext(a=5, b=9)


def test_ciphertext_wire_form() -> None:
    ct = Ciphertext(a=5, b=9, p=P)
    assert ct.to_model().to_wire() == {"a": "5", "b": "9", "p": str(P)}
    assert Ciphertext(a=5, b=9).to_model().to_wire() == {"a": "5", "b": "9"}
    assert parse_ciphertext({"a": "5", "b": "9", "p": str(P)}) == ct


@pytest.mark.parametrize("data", ["5", "5;9;1;2", "x;9;3", {"a": "5"}])
def test_parse_ciphertext_rejects_malformed(data) -> None:
    with pytest.raises(KeyFormatError):
        parse_ciphertext(data)
