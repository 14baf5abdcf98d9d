"""
Signing and verification key material for issued tokens.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from shared.config import BaseConfig


class AlgorithmFamily(str, Enum):
    """Signature algorithm families."""
    HMAC = "hmac"
    RSA = "rsa"
    ECDSA = "ecdsa"


ALGORITHMS = {
    "HS256": AlgorithmFamily.HMAC,
    "HS384": AlgorithmFamily.HMAC,
    "HS512": AlgorithmFamily.HMAC,
    "RS256": AlgorithmFamily.RSA,
    "RS384": AlgorithmFamily.RSA,
    "RS512": AlgorithmFamily.RSA,
    "ES256": AlgorithmFamily.ECDSA,
    "ES384": AlgorithmFamily.ECDSA,
    "ES512": AlgorithmFamily.ECDSA,
}

Key = Union[str, bytes]


def resolve_family(algorithm: str) -> AlgorithmFamily:
    """Return the family of a JWS algorithm name such as ``RS256``."""
    try:
        return ALGORITHMS[algorithm]
    except KeyError:
        raise ValueError(f"Unsupported token algorithm: {algorithm}") from None


@dataclass(frozen=True)
class KeyMaterial:
    """Immutable key material for exactly one configured algorithm.

    For HMAC both keys are the shared secret; for RSA and ECDSA the signing
    key is the PEM encoded private key and the verification key the PEM
    encoded public key.
    """

    algorithm: str
    family: AlgorithmFamily
    signing_key: Key
    verification_key: Key

    @classmethod
    def from_secret(cls, algorithm: str, secret: str) -> "KeyMaterial":
        family = resolve_family(algorithm)
        if family is not AlgorithmFamily.HMAC:
            raise ValueError(f"{algorithm} needs a key pair, not a shared secret")
        if not secret:
            raise ValueError("HMAC algorithms need a non-empty secret")
        return cls(algorithm, family, secret, secret)

    @classmethod
    def from_pem(cls, algorithm: str, private_pem: bytes, public_pem: bytes) -> "KeyMaterial":
        family = resolve_family(algorithm)
        if family is AlgorithmFamily.HMAC:
            raise ValueError(f"{algorithm} needs a shared secret, not a key pair")
        return cls(algorithm, family, private_pem, public_pem)


def _read_pem(path: Optional[str], what: str) -> bytes:
    if not path:
        raise ValueError(f"No {what} key file configured")
    return Path(path).read_bytes()


def load_key_material(config: BaseConfig) -> KeyMaterial:
    """Load key material once at process start from the configuration."""
    family = resolve_family(config.jwt_algorithm)
    if family is AlgorithmFamily.HMAC:
        return KeyMaterial.from_secret(config.jwt_algorithm, config.jwt_secret or "")

    return KeyMaterial.from_pem(
        config.jwt_algorithm,
        _read_pem(config.jwt_private_key_file, "private"),
        _read_pem(config.jwt_public_key_file, "public"),
    )
