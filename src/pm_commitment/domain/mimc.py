"""MiMC-Sponge over the BN254 scalar field.

Same construction as circomlib's ``MiMCSponge`` (Feistel network, x^5 S-box,
220 rounds) so a circom circuit can recompute every hash produced here:

    constants: c[0] = 0, c[i] = keccak256^i("mimcsponge") mod p, c[219] = 0
    hash(xL, xR, k): per round t = xL + k + c[i]; (xL, xR) = (xR + t^5, xL)
                     (the last round only updates xR)
    multi_hash(inputs, k): absorb each input into R, permute (R, C)

The sponge key ``k`` doubles as a domain-separation tag.
"""
from functools import lru_cache

from eth_utils import keccak

FIELD_MODULUS = 21888242871839275222246405745257275088548364400416417968314179120713883553057

N_ROUNDS = 220
SEED = b"mimcsponge"


@lru_cache(maxsize=1)
def round_constants() -> tuple[int, ...]:
    constants = [0] * N_ROUNDS
    c = keccak(SEED)
    for i in range(1, N_ROUNDS):
        c = keccak(c)
        constants[i] = int.from_bytes(c, "big") % FIELD_MODULUS
    constants[N_ROUNDS - 1] = 0
    return tuple(constants)


def mimc_feistel(x_left: int, x_right: int, key: int) -> tuple[int, int]:
    """One full MiMC permutation of (xL, xR) under key k."""
    p = FIELD_MODULUS
    cts = round_constants()
    for i in range(N_ROUNDS):
        t = (x_left + key + cts[i]) % p
        t5 = pow(t, 5, p)
        if i < N_ROUNDS - 1:
            x_left, x_right = (x_right + t5) % p, x_left
        else:
            x_right = (x_right + t5) % p
    return x_left, x_right


def mimc_sponge(inputs: list[int], key: int = 0, n_outputs: int = 1) -> list[int]:
    """Absorb ``inputs`` and squeeze ``n_outputs`` field elements.

    Inputs must already be canonical field elements; range checks are the
    caller's job (see ``codec.encode_field``).
    """
    if not inputs:
        raise ValueError("mimc_sponge needs at least one input")
    r, c = 0, 0
    for value in inputs:
        r = (r + value) % FIELD_MODULUS
        r, c = mimc_feistel(r, c, key)
    outputs = [r]
    for _ in range(1, n_outputs):
        r, c = mimc_feistel(r, c, key)
        outputs.append(r)
    return outputs
