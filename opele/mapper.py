"""
Sign mapper.

Maps a seed to one of the 256 signs. The 8-bit binary form of the seed is
split into two 4-bit legs (right leg first); each leg is named from the
table of sixteen apola, and each bit renders as an open (1) or closed (0)
seed on the chain.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Tuple

from .data.models import LegMark, SignDescriptor

SEED_RANGE = 256


@dataclass(frozen=True)
class Apola:
    """One of the sixteen single-leg signs."""
    name: str
    rank: int
    bits: str


UNKNOWN_APOLA = Apola(name="Unknown", rank=0, bits="????")

# Rank order. One entry per 4-bit pattern.
APOLA_TABLE: Tuple[Apola, ...] = (
    Apola("Ogbe", 1, "0000"),
    Apola("Oyeku", 2, "1111"),
    Apola("Iwori", 3, "1001"),
    Apola("Odi", 4, "0110"),
    Apola("Irosun", 5, "0010"),
    Apola("Owonrin", 6, "0100"),
    Apola("Obara", 7, "0111"),
    Apola("Okanran", 8, "1110"),
    Apola("Ogunda", 9, "0001"),
    Apola("Osa", 10, "1000"),
    Apola("Ika", 11, "1100"),
    Apola("Oturupon", 12, "0011"),
    Apola("Otura", 13, "1010"),
    Apola("Irete", 14, "0101"),
    Apola("Ose", 15, "1101"),
    Apola("Ofun", 16, "1011"),
)

APOLA_BY_BITS: Dict[str, Apola] = {apola.bits: apola for apola in APOLA_TABLE}


def to_binary(seed: int) -> str:
    """Zero-padded 8-character base-2 string. The caller reduces mod 256."""
    return format(seed, "08b")


def apola(bits: str) -> Apola:
    """Table entry for a 4-bit pattern, or the Unknown sentinel."""
    return APOLA_BY_BITS.get(bits, UNKNOWN_APOLA)


def leg_marks(bits: str) -> Tuple[LegMark, ...]:
    return tuple(LegMark.OPEN if bit == "1" else LegMark.CLOSED for bit in bits)


def sign_name(right_bits: str, left_bits: str) -> str:
    right = apola(right_bits)
    if right_bits == left_bits:
        if right.rank == 1:
            return f"Eji {right.name}"
        return f"{right.name} Meji"
    return f"{right.name}-{apola(left_bits).name}"


@lru_cache(maxsize=SEED_RANGE)
def _profile(index: int) -> SignDescriptor:
    binary = to_binary(index)
    right_bits, left_bits = binary[:4], binary[4:]
    return SignDescriptor(
        index=index,
        binary_signature=binary,
        name=sign_name(right_bits, left_bits),
        right_leg=leg_marks(right_bits),
        left_leg=leg_marks(left_bits),
    )


def get_profile(seed: int) -> SignDescriptor:
    """
    Descriptor for any integer seed.

    The seed is reduced modulo 256 first; negative seeds wrap into range.
    """
    return _profile(int(seed) % SEED_RANGE)


class SignMapper:
    """Object wrapper around the module functions, for callers that inject a mapper."""

    def to_binary(self, seed: int) -> str:
        return to_binary(seed)

    def get_profile(self, seed: int) -> SignDescriptor:
        return get_profile(seed)

    def all_profiles(self) -> Tuple[SignDescriptor, ...]:
        return tuple(_profile(index) for index in range(SEED_RANGE))
