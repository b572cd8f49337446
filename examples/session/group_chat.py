"""
Group chat example with E2EESession.

Two users register through a KeyGenService, one starts a conversation,
and both exchange messages under the shared sender key.
"""

import logging
import sys
from pathlib import Path

# Add the project root to the path to import easye2ee
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from easye2ee import E2EESession, KeyGenService
from easye2ee.common.exceptions import E2EEError


def main() -> None:
    # Configure logging
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger(__name__)

    try:
        # 512-bit keys keep the example quick; real deployments use more
        with KeyGenService(bits=512) as service:
            alice, _ = E2EESession.register("alice", "alice-password", service)
            bob, _ = E2EESession.register("bob", "bob-password", service)

        # Alice creates the conversation; the payload is what a server stores
        payload = alice.create_conversation("general", {"bob": bob.public_key})
        bob.join_conversation("general", payload.to_wire()["encryptedKeys"])

        message = alice.encrypt_message("general", "Hello Bob!")
        logger.info("Ciphertext on the wire: %s", message.to_wire())
        logger.info("Bob reads: %s", bob.decrypt_message(message.to_wire()))

        reply = bob.encrypt_message("general", "Hi Alice!")
        logger.info("Alice reads: %s", alice.decrypt_history([reply])[0])

        alice.logout()
        bob.logout()
        logger.info("Group chat example completed")
    except E2EEError:
        logger.exception("Error")
        sys.exit(1)


if __name__ == "__main__":
    main()
