# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Signed confirmations for the controlled-accounts resolver.

Message
-------
digest = keccak256( "ControlledAccounts:confirm:v1" || account20 || controller20 || resolver20 )

The account signs ``digest`` as an EIP-191 personal message
(``"\\x19Ethereum Signed Message:\\n32" || digest``), the form every wallet
produces. Binding the resolver address keeps a signature from being replayed
against another deployment.
"""

from __future__ import annotations

from typing import Union

from eth_account import Account
from eth_account.messages import encode_defunct

from .constants import CONTROLLED_ACCOUNTS_SIG_TAG
from .errors import InvalidSignature
from .utils.bytes import BytesLike, address_bytes, as_bytes, normalize_address
from .utils.hash import keccak256_concat


def confirmation_digest(account: str, controller: str, resolver: str) -> bytes:
    return keccak256_concat(
        address_bytes(account),
        address_bytes(controller),
        address_bytes(resolver),
        domain=CONTROLLED_ACCOUNTS_SIG_TAG,
    )


def sign_confirmation(private_key: Union[str, bytes], controller: str, resolver: str) -> bytes:
    """Sign a confirmation of *controller* with the account owning *private_key*."""
    account = Account.from_key(private_key)
    digest = confirmation_digest(account.address, controller, resolver)
    signed = account.sign_message(encode_defunct(primitive=digest))
    return bytes(signed.signature)


def recover_signer(digest: bytes, signature: BytesLike) -> str:
    """Address that produced *signature* over *digest* (lowercase ``0x`` form)."""
    recovered = Account.recover_message(encode_defunct(primitive=digest), signature=as_bytes(signature))
    return normalize_address(recovered)


def verify_confirmation(account: str, controller: str, resolver: str, signature: BytesLike) -> None:
    """Raise :class:`InvalidSignature` unless *account* signed the confirmation."""
    account = normalize_address(account)
    digest = confirmation_digest(account, controller, resolver)
    try:
        recovered = recover_signer(digest, signature)
    except Exception as e:
        raise InvalidSignature(account, None) from e
    if recovered != account:
        raise InvalidSignature(account, recovered)


__all__ = ["confirmation_digest", "sign_confirmation", "recover_signer", "verify_confirmation"]
