"""
Token codec for the three-segment signed token format.

``base64url(header) "." base64url(payload) "." base64url(signature)`` with
the header ``{"alg", "typ"}`` and a JSON object payload. Signing and
verification are delegated to python-jose's JWS implementation.

Segments must be canonical unpadded base64url. The decoder ignores the
unused low bits of a segment's last character, so a segment that does not
re-encode to itself is treated as altered.
"""

import json
from dataclasses import dataclass
from typing import Dict, Any

from jose import jws
from jose.exceptions import JOSEError
from jose.utils import base64url_decode, base64url_encode

from ..exceptions import TokenUndecodable
from .keys import KeyMaterial


@dataclass(frozen=True)
class DecodedToken:
    """Unverified header and payload of a token."""

    header: Dict[str, Any]
    payload: Dict[str, Any]


def is_canonical_segment(segment: str) -> bool:
    """True if ``segment`` is exactly the unpadded base64url encoding of its bytes."""
    try:
        raw = base64url_decode(segment.encode("ascii"))
    except ValueError:
        return False
    return base64url_encode(raw).decode("ascii") == segment


class TokenCodec:
    """Encode and verify tokens for one configured algorithm."""

    def __init__(self, key_material: KeyMaterial, token_type: str = "JWT"):
        self.key_material = key_material
        self.token_type = token_type

    @property
    def algorithm(self) -> str:
        return self.key_material.algorithm

    def encode(self, payload: Dict[str, Any]) -> str:
        """Sign ``payload`` and return the compact token string.

        The payload has to be JSON serialisable; callers are responsible for
        its shape.
        """
        return jws.sign(
            payload,
            self.key_material.signing_key,
            headers={"typ": self.token_type},
            algorithm=self.key_material.algorithm,
        )

    def decode(self, token: str) -> DecodedToken:
        """Decode header and payload without checking the signature.

        Raises:
            TokenUndecodable: if either segment is not canonical base64url
                encoded JSON object data.
        """
        header_segment, _, rest = token.partition(".")
        payload_segment = rest.partition(".")[0]
        for name, segment in (("header", header_segment), ("payload", payload_segment)):
            if not is_canonical_segment(segment):
                raise TokenUndecodable(
                    f"Token {name} is not canonical base64url",
                    details={"segment": name},
                )

        try:
            header = jws.get_unverified_header(token)
            raw_payload = jws.get_unverified_claims(token)
            payload = json.loads(raw_payload.decode("utf-8"))
        except (JOSEError, ValueError, UnicodeDecodeError) as exc:
            raise TokenUndecodable(details={"error": str(exc)}) from exc

        if not isinstance(header, dict) or not isinstance(payload, dict):
            raise TokenUndecodable("Token header and payload must be JSON objects")

        return DecodedToken(header=header, payload=payload)

    def verify(self, token: str) -> bool:
        """Return True if the signature matches the configured key.

        Never raises; a token with a non-canonical segment does not verify.
        """
        segments = token.split(".")
        if len(segments) != 3 or not all(is_canonical_segment(s) for s in segments):
            return False
        try:
            jws.verify(
                token,
                self.key_material.verification_key,
                algorithms=[self.key_material.algorithm],
            )
        except (JOSEError, ValueError):
            return False
        return True
