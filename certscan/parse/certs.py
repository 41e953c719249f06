"""Regex patterns for pulling cert numbers out of pasted text."""

import re
from typing import List, Optional

from ..core.constants import MIN_CERT_DIGITS
from ..core.types import CertRequest, Grader


# Compiled regex patterns for reuse
GRADER_PATTERN = re.compile(r'(PSA|SGC|BGS)', re.IGNORECASE)
CERT_NUMBER_PATTERN = re.compile(r'\d{%d,}' % MIN_CERT_DIGITS)
WHITESPACE_PATTERN = re.compile(r'\s+')


def find_cert_number(text: str) -> Optional[str]:
    """
    Return the first run of six or more digits in text.

    Examples:
        >>> find_cert_number("PSA12345678")
        '12345678'
        >>> find_cert_number("12345") is None
        True
    """
    match = CERT_NUMBER_PATTERN.search(text)
    return match.group(0) if match else None


def parse_certs(text: str) -> List[CertRequest]:
    """
    Parse every (grader, cert number) pair out of free-form input.

    Whitespace is removed first so scanners that inject spaces or line
    breaks mid-number still parse. A grader token claims the first digit
    run in the segment that follows it; tokens without digits and digits
    without a token are dropped. With no grader token at all, the first
    digit run is taken as a PSA cert.

    Examples:
        >>> [(c.grader.value, c.cert_number) for c in parse_certs("PSA12345678 SGC98765432")]
        [('PSA', '12345678'), ('SGC', '98765432')]
        >>> [(c.grader.value, c.cert_number) for c in parse_certs("12345678")]
        [('PSA', '12345678')]
        >>> parse_certs("abc")
        []
    """
    cleaned = WHITESPACE_PATTERN.sub('', text or '')

    if not GRADER_PATTERN.search(cleaned):
        cert_number = find_cert_number(cleaned)
        return [CertRequest(Grader.PSA, cert_number)] if cert_number else []

    parts = [part for part in GRADER_PATTERN.split(cleaned) if part]
    certs = []
    for i, part in enumerate(parts[:-1]):
        if not GRADER_PATTERN.fullmatch(part):
            continue
        cert_number = find_cert_number(parts[i + 1])
        if cert_number:
            certs.append(CertRequest(Grader(part.upper()), cert_number))

    return certs
