"""
Authentication failure kinds.

Every stage of bearer token validation fails with its own exception type so
that callers and logs can tell them apart; all of them are
``AuthenticationError`` and therefore answered with 401.
"""

from typing import Dict, Any, Optional

from shared.errors import AuthenticationError


class AuthorizationMissing(AuthenticationError):
    def __init__(self, message: str = "Authorization header is missing", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, code="AUTHORIZATION_MISSING")


class AuthorizationMalformed(AuthenticationError):
    def __init__(self, message: str = "Authorization header is malformed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, code="AUTHORIZATION_MALFORMED")


class SchemeInvalid(AuthenticationError):
    def __init__(self, message: str = "Authorization scheme must be Bearer", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, code="SCHEME_INVALID")


class TokenMalformed(AuthenticationError):
    def __init__(self, message: str = "Token does not consist of 3 parts", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, code="TOKEN_MALFORMED")


class TokenUndecodable(AuthenticationError):
    def __init__(self, message: str = "Token cannot be decoded", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, code="TOKEN_UNDECODABLE")


class AlgorithmMismatch(AuthenticationError):
    def __init__(self, message: str = "Token algorithm is not accepted", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, code="ALGORITHM_MISMATCH")


class SignatureInvalid(AuthenticationError):
    def __init__(self, message: str = "Token signature is invalid", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, code="SIGNATURE_INVALID")


class TokenExpired(AuthenticationError):
    def __init__(self, message: str = "Token is expired", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, code="TOKEN_EXPIRED")


class IssuerInvalid(AuthenticationError):
    def __init__(self, message: str = "Token issuer is invalid", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, code="ISSUER_INVALID")


class SubjectUnknown(AuthenticationError):
    def __init__(self, message: str = "Token subject is unknown", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, code="SUBJECT_UNKNOWN")
