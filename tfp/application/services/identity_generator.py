"""
Identity Generator.

Collision-resistant identifiers scoped to one run. Every name is a pure
function of (namespace, base, run token): repeated calls inside a session
return the same value, two sessions differ with overwhelming probability.

Formats:
- id:         "{base}-{namespace}-{run_id}"
- email:      "{base}.{namespace}.{run_id}@{email_domain}"
- group name: "{name} {namespace} {run_id}"
- store name: "{display_name}-{owner_id}", capped at STORE_NAME_MAX_LENGTH
"""

import hashlib
import re
import secrets
import string
from typing import Optional

RUN_ID_LENGTH = 8
RUN_ID_ALPHABET = string.digits + string.ascii_lowercase
STORE_NAME_MAX_LENGTH = 64
DEFAULT_EMAIL_DOMAIN = "tfp.test"

_SLUG_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]+")


def new_run_id() -> str:
    """Random 8-character base-36 run token."""
    return "".join(secrets.choice(RUN_ID_ALPHABET) for _ in range(RUN_ID_LENGTH))


def slug(value: str) -> str:
    """Make a value safe for ids and email local parts."""
    cleaned = _SLUG_UNSAFE.sub("-", value.strip()).strip("-.")
    if not cleaned:
        raise ValueError(f"Cannot derive an identifier from {value!r}")
    return cleaned


def cap_store_name(name: str, max_length: int = STORE_NAME_MAX_LENGTH) -> str:
    """
    Fit a store name into max_length.

    Over-long names are truncated and suffixed with a digest of the full
    name, so two names sharing a long prefix stay distinct.
    """
    if len(name) <= max_length:
        return name
    digest = hashlib.sha1(name.encode("utf-8")).hexdigest()[:8]
    return f"{name[:max_length - len(digest) - 1]}-{digest}"


class IdentityGenerator:
    """
    Run-scoped name generator.

    Usage:
        generator = IdentityGenerator("billing")
        generator.generate("admin")       # "admin-billing-k3x9q0zb"
        generator.email("admin")          # "admin.billing.k3x9q0zb@tfp.test"
    """

    def __init__(
        self,
        namespace: str,
        run_id: Optional[str] = None,
        email_domain: str = DEFAULT_EMAIL_DOMAIN,
    ):
        """
        Args:
            namespace: Test file or suite the fixtures belong to
            run_id: Fixed run token (random when omitted)
            email_domain: Domain of generated emails
        """
        self._namespace = slug(namespace)
        self._run_id = run_id or new_run_id()
        self._email_domain = email_domain

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def run_id(self) -> str:
        return self._run_id

    @property
    def email_domain(self) -> str:
        return self._email_domain

    def generate(self, base: str) -> str:
        """Unique identifier for base within this run."""
        return f"{slug(base)}-{self._namespace}-{self._run_id}"

    def identity_id(self, base: str) -> str:
        return self.generate(base)

    def email(self, base: str) -> str:
        return f"{slug(base)}.{self._namespace}.{self._run_id}@{self._email_domain}"

    def group_name(self, name: str) -> str:
        return f"{name} {self._namespace} {self._run_id}"

    def group_store_name(self, display_name: str, owner_id: str) -> str:
        """Name the store record is found or created by."""
        return cap_store_name(f"{display_name}-{owner_id}")


def generate(namespace: str, base: str, run_id: str) -> str:
    """Stateless form of IdentityGenerator.generate for a known run token."""
    return IdentityGenerator(namespace, run_id=run_id).generate(base)
