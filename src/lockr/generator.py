"""Random password generation and strength scoring."""

import secrets
import string
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

LOWERCASE = string.ascii_lowercase
UPPERCASE = string.ascii_uppercase
NUMBERS = string.digits
SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"
AMBIGUOUS = "l1IO0"
DEFAULT_ALPHABET = LOWERCASE + UPPERCASE + NUMBERS

# external option name -> attribute name
_OPTION_NAMES = {
    "length": "length",
    "includeUppercase": "include_uppercase",
    "includeLowercase": "include_lowercase",
    "includeNumbers": "include_numbers",
    "includeSymbols": "include_symbols",
    "excludeAmbiguous": "exclude_ambiguous",
}


@dataclass(frozen=True)
class PasswordPolicy:
    """Constraints for a generated password."""

    length: int = 16
    include_uppercase: bool = True
    include_lowercase: bool = True
    include_numbers: bool = True
    include_symbols: bool = True
    exclude_ambiguous: bool = False

    def __post_init__(self):
        if self.length < 1:
            raise ValueError(f"password length must be at least 1, got {self.length}")

    def alphabet(self) -> str:
        """Characters a generated password may contain.

        Falls back to letters and digits when the selected classes leave
        nothing to draw from.
        """
        charset = ""
        if self.include_lowercase:
            charset += LOWERCASE
        if self.include_uppercase:
            charset += UPPERCASE
        if self.include_numbers:
            charset += NUMBERS
        if self.include_symbols:
            charset += SYMBOLS

        if self.exclude_ambiguous:
            charset = "".join(c for c in charset if c not in AMBIGUOUS)

        return charset or DEFAULT_ALPHABET

    def to_dict(self) -> dict[str, Any]:
        """Convert policy to its external option names."""
        return {option: getattr(self, attr) for option, attr in _OPTION_NAMES.items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PasswordPolicy":
        """Create policy from external option names.

        Unrecognized options, and values of the wrong type (a length that is
        not an integer, a flag that is not a boolean), are ignored and keep
        their defaults.

        Raises:
            ValueError: If length is an integer below one
        """
        kwargs = {}
        for option, attr in _OPTION_NAMES.items():
            value = data.get(option)
            if attr == "length":
                if isinstance(value, int) and not isinstance(value, bool):
                    kwargs[attr] = value
            elif isinstance(value, bool):
                kwargs[attr] = value
        return cls(**kwargs)


class StrengthLabel(str, Enum):
    WEAK = "Weak"
    FAIR = "Fair"
    GOOD = "Good"
    STRONG = "Strong"


@dataclass(frozen=True)
class StrengthScore:
    """Heuristic rating of a password."""

    score: int
    label: StrengthLabel


def generate(policy: Optional[PasswordPolicy] = None) -> str:
    """Generate a random password.

    Every character is an independent uniform draw from the policy alphabet.
    Characters may repeat and not every selected class is guaranteed to
    appear.

    Args:
        policy: Generation constraints, defaults to :class:`PasswordPolicy`

    Returns:
        A password of exactly ``policy.length`` characters
    """
    if policy is None:
        policy = PasswordPolicy()
    alphabet = policy.alphabet()
    return "".join(secrets.choice(alphabet) for _ in range(policy.length))


def score(password: str) -> int:
    """Score a password from 0 to 100.

    This is a heuristic over length and character variety, not an entropy
    estimate. Length counts UTF-16 code units, so a character outside the
    Basic Multilingual Plane (most emoji) counts twice, matching browser
    clients; distinct characters count code points.
    """
    if not password:
        return 0

    length = len(password.encode("utf-16-le", errors="surrogatepass")) // 2
    total = min(length * 4, 40)
    if any(c in LOWERCASE for c in password):
        total += 10
    if any(c in UPPERCASE for c in password):
        total += 10
    if any(c in NUMBERS for c in password):
        total += 10
    if any(c not in DEFAULT_ALPHABET for c in password):
        total += 15
    total += min(len(set(password)) * 2, 15)

    return max(0, min(total, 100))


def label_for(value: int) -> StrengthLabel:
    """Map a score to its strength label."""
    if value < 30:
        return StrengthLabel.WEAK
    if value < 60:
        return StrengthLabel.FAIR
    if value < 80:
        return StrengthLabel.GOOD
    return StrengthLabel.STRONG


def assess(password: str) -> StrengthScore:
    """Score a password and attach its label."""
    value = score(password)
    return StrengthScore(score=value, label=label_for(value))
