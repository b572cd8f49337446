import pytest

from easye2ee.crypto.elgamal import ElGamal
from easye2ee.crypto.keys import KeyPair

# Large enough to carry a wrapped 32-character sender key in one block.
TEST_KEY_BITS = 512
TEST_ROUNDS = 20


@pytest.fixture(scope="session")
def alice_keys() -> KeyPair:
    return ElGamal(bits=TEST_KEY_BITS, rounds=TEST_ROUNDS).generate_keys()


@pytest.fixture(scope="session")
def bob_keys() -> KeyPair:
    return ElGamal(bits=TEST_KEY_BITS, rounds=TEST_ROUNDS).generate_keys()


@pytest.fixture(scope="session")
def carol_keys() -> KeyPair:
    return ElGamal(bits=TEST_KEY_BITS, rounds=TEST_ROUNDS).generate_keys()
