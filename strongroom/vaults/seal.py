"""
Vault unseal checks for Strongroom.

The server stores a probe the client made by encrypting a public marker with
its derived key. Unsealing is decided by the client alone: the server only
hands the probe back and refuses any request that carries secret material.
"""

import base64
import binascii
import logging
from typing import Any, Awaitable, Callable, Mapping, Optional, Union
from uuid import UUID

from ..errors import InvalidProbeFormat, ProtocolViolation, VaultCorrupted
from .models import SealedProbe, UnsealChallenge

logger = logging.getLogger(__name__)
security_logger = logging.getLogger("strongroom.security")

# Public marker the client encrypts. Knowing it reveals nothing about the key.
UNSEAL_MARKER = b"strongroom:unseal-check:v1"

# AES-256-GCM envelope: 96-bit nonce, ciphertext as long as the marker, 128-bit tag
NONCE_SIZE = 12
TAG_SIZE = 16
PROBE_SIZE = NONCE_SIZE + len(UNSEAL_MARKER) + TAG_SIZE

# The only field an unseal request may carry
UNSEAL_REQUEST_FIELDS = frozenset({"vault_id"})

SECRET_FIELD_HINTS = (
    "password",
    "passphrase",
    "key",
    "secret",
    "marker",
    "plain",
    "decrypt",
)


class VaultSeal:
    """
    Probe validation and the unseal protocol boundary.

    Stateless; one instance is shared by the whole process.

    Example:
        ```python
        seal = VaultSeal()

        # At vault creation
        probe = seal.create_probe(submitted_bytes)

        # On the unseal endpoint; the loader runs only if the request is clean
        challenge = await seal.verify_unseal(vault_id, request_body, load_stored)
        ```
    """

    marker = UNSEAL_MARKER
    probe_size = PROBE_SIZE

    def create_probe(self, opaque: Union[bytes, str]) -> SealedProbe:
        """
        Accept a client-made probe for storage.

        Only the envelope size is checked. The server cannot tell whether the
        key behind it is right.

        Args:
            opaque: Raw envelope bytes, or their base64 text

        Raises:
            InvalidProbeFormat: If the input is not base64 or has the wrong size
        """
        raw = opaque
        if isinstance(opaque, str):
            try:
                raw = base64.b64decode(opaque, validate=True)
            except (binascii.Error, ValueError):
                raise InvalidProbeFormat("Unseal check is not valid base64") from None

        if not isinstance(raw, (bytes, bytearray)):
            raise InvalidProbeFormat("Unseal check must be bytes")

        if len(raw) != PROBE_SIZE:
            raise InvalidProbeFormat(
                f"Unseal check must be {PROBE_SIZE} bytes, got {len(raw)}"
            )

        return SealedProbe.from_bytes(bytes(raw), NONCE_SIZE)

    def load_probe(self, stored: Optional[str]) -> SealedProbe:
        """
        Decode the probe as it came back from storage.

        Raises:
            VaultCorrupted: If the probe is missing or damaged
        """
        if not stored:
            raise VaultCorrupted("Vault has no unseal check")

        try:
            raw = base64.b64decode(stored, validate=True)
        except (binascii.Error, ValueError):
            raise VaultCorrupted("Stored unseal check is not valid base64") from None

        if len(raw) != PROBE_SIZE:
            raise VaultCorrupted("Stored unseal check has the wrong size")

        return SealedProbe.from_bytes(raw, NONCE_SIZE)

    def check_unseal_request(self, request: Optional[Mapping[str, Any]]) -> None:
        """
        Enforce the zero-knowledge boundary on an unseal request.

        An unseal request names a vault and nothing else. Any other field is
        rejected before storage is touched, and fields that look like a
        password, key or decrypted marker are reported as a security event.

        Raises:
            ProtocolViolation: If the request carries anything but ``vault_id``
        """
        if not request:
            return

        extra = set(request) - UNSEAL_REQUEST_FIELDS
        if not extra:
            return

        secret = sorted(
            name for name in extra
            if any(hint in str(name).lower() for hint in SECRET_FIELD_HINTS)
        )
        if secret:
            security_logger.warning(
                "Unseal request carried secret material in %s; rejected", ", ".join(secret)
            )
            raise ProtocolViolation(
                "Vault passwords, keys and plaintext must never be sent to the server",
                fields=secret,
            )

        security_logger.warning(
            "Unseal request carried unexpected fields %s; rejected",
            ", ".join(sorted(map(str, extra))),
        )
        raise ProtocolViolation("Unseal requests may only carry vault_id", fields=extra)

    def challenge(self, vault_id: UUID, stored: Optional[str]) -> UnsealChallenge:
        """Build the response the client unseals against."""
        probe = self.load_probe(stored)
        return UnsealChallenge(
            vault_id=vault_id,
            unseal_check=probe.to_base64(),
            nonce_size=NONCE_SIZE,
            tag_size=TAG_SIZE,
        )

    async def verify_unseal(
        self,
        vault_id: UUID,
        request: Optional[Mapping[str, Any]],
        load: Callable[[], Awaitable[Optional[str]]],
    ) -> UnsealChallenge:
        """
        Hand back a vault's stored probe for the client to try.

        The server never decides whether the vault is unsealed. ``load`` reads
        the stored probe and is awaited only after the request has passed the
        protocol boundary.

        Args:
            vault_id: Vault being unsealed
            request: The raw unseal request body
            load: Coroutine factory returning the stored ``unseal_check``

        Raises:
            ProtocolViolation: If the request carries anything but ``vault_id``
            ValueError: If the request names another or a malformed vault id
            VaultCorrupted: If the stored probe is missing or damaged
        """
        self.check_unseal_request(request)

        if request:
            try:
                requested = UUID(str(request["vault_id"]))
            except ValueError:
                raise ValueError("vault_id in request is not a valid id") from None
            if requested != UUID(str(vault_id)):
                raise ValueError("vault_id in request does not match the vault being unsealed")

        stored = await load()
        return self.challenge(vault_id, stored)
