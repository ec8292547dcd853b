"""
Text field normalization rules.
"""

from typing import Optional

CRYPTO_PREFIX = "Crypto"
CRYPTO_INDUSTRY = "Crypto"
UNITED_STATES_PREFIX = "United States"


def trim_company(company: Optional[str]) -> Optional[str]:
    """Strip leading and trailing whitespace from a company name."""
    if company is None:
        return None
    return company.strip()


def canonical_industry(industry: Optional[str]) -> Optional[str]:
    """Collapse every ``Crypto*`` variant (e.g. "Crypto Currency") to "Crypto".

    The prefix match is case-sensitive, so "cryptography" is left alone.
    """
    if industry is not None and industry.startswith(CRYPTO_PREFIX):
        return CRYPTO_INDUSTRY
    return industry


def strip_country_punctuation(country: Optional[str]) -> Optional[str]:
    """Drop trailing periods from "United States." style country names."""
    if country is not None and country.startswith(UNITED_STATES_PREFIX):
        return country.rstrip(".")
    return country
