"""Commitment codec: canonical field encoding, commitment and nullifier.

    commitment = MiMC_k1(salt, quantity, limitPrice, side,
                         instrumentAddress, instrumentId, trader)
    nullifier  = MiMC_k2(salt, trader)

Pure and deterministic: no I/O, no retries, no truncation. Every input is
range-checked against the field modulus; an out-of-range value raises
EncodingOverflowError because reducing it mod p would let two different
orders share one commitment.
"""
import secrets

from eth_utils import is_hex_address, to_canonical_address

from src.pm_commitment.domain.mimc import FIELD_MODULUS, mimc_sponge
from src.pm_commitment.domain.models import Commitment, OrderParameters
from src.pm_common.errors import EncodingOverflowError, InvalidOrderParamsError

COMMITMENT_DOMAIN = 1
NULLIFIER_DOMAIN = 2


def encode_field(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidOrderParamsError(f"{name} must be an integer")
    if value < 0 or value >= FIELD_MODULUS:
        raise EncodingOverflowError(name, value)
    return value


def encode_address(name: str, address: str) -> int:
    """20-byte address as its 160-bit integer value (case-insensitive)."""
    if not isinstance(address, str) or not is_hex_address(address):
        raise InvalidOrderParamsError(f"{name} is not a 20-byte hex address: {address!r}")
    return int.from_bytes(to_canonical_address(address), "big")


def commitment_inputs(salt: int, params: OrderParameters, trader: str) -> list[tuple[str, int]]:
    """Ordered (witness name, field element) pairs hashed into the commitment.

    Names match the order-commitment circuit's private inputs.
    """
    return [
        ("salt", encode_field("salt", salt)),
        ("quantity", encode_field("quantity", params.quantity)),
        ("limitPrice", encode_field("limitPrice", params.limit_price)),
        ("side", encode_field("side", int(params.side))),
        ("instrumentAddress", encode_address("instrumentAddress", params.instrument.address)),
        ("instrumentId", encode_field("instrumentId", params.instrument.instance_id)),
        ("trader", encode_address("trader", trader)),
    ]


def commitment_hash(salt: int, params: OrderParameters, trader: str) -> int:
    values = [v for _, v in commitment_inputs(salt, params, trader)]
    return mimc_sponge(values, key=COMMITMENT_DOMAIN)[0]


def nullifier(salt: int, trader: str) -> int:
    values = [encode_field("salt", salt), encode_address("trader", trader)]
    return mimc_sponge(values, key=NULLIFIER_DOMAIN)[0]


def commit(salt: int, params: OrderParameters, trader: str) -> Commitment:
    """(salt, params, trader) -> Commitment(commitment_hash, nullifier)."""
    return Commitment(
        salt=salt,
        commitment_hash=commitment_hash(salt, params, trader),
        nullifier=nullifier(salt, trader),
    )


def generate_salt() -> int:
    """Uniform in [1, p) from the OS CSPRNG; never needs reduction."""
    return secrets.randbelow(FIELD_MODULUS - 1) + 1
