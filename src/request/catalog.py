# src/request/catalog.py - v1
"""Compatibility table: organization type -> transaction pattern -> categories.

The table is static data. Organization aliases map short or alternate
spellings onto the canonical keys below.
"""

from __future__ import annotations

_PRIVATE_B2C_LIKE = [
    "White Label",
    "Private Label",
    "Wholesaling",
    "Dropshipping",
    "Subscription Service",
]

_LLP_CATEGORIES = [
    "Profit Sharing Agreement",
    "Dissolution Agreement",
    "Partner Exit Agreement",
    "Project Collaboration Agreement",
    "Dispute Resolution Mechanism",
    "Partner Capital Contributions",
]

_GOVERNMENT_CATEGORIES = [
    "Freelancing agreement",
    "Consulting contract",
    "Rental agreement",
    "Project management agreement",
]

COMPATIBILITY: dict[str, dict[str, list[str]]] = {
    "PRIVATE LIMITED COMPANY": {
        "B2B": [
            "Equity Tokenization",
            "Vesting Agreements",
            "Supply Chain Management",
            "Revenue Sharing Agreement",
            "Corporate Governance",
            "Intellectual Property Licensing",
        ],
        "B2C": list(_PRIVATE_B2C_LIKE),
        "B2B2C": list(_PRIVATE_B2C_LIKE),
        "B2G": ["Equity Tokenization", "Vesting Agreements"],
        "C2B": ["White Label", "Private Label"],
        "D2C": ["White Label", "Private Label"],
        "C2C": ["White Label", "Private Label"],
        "G2C": ["White Label", "Private Label"],
        "G2B": ["White Label", "Private Label"],
    },
    "LIMITED LIABILITY PARTNERSHIP": {
        tx: list(_LLP_CATEGORIES)
        for tx in ("B2C", "B2B", "B2B2C", "B2G", "C2B", "D2C", "C2C", "G2C", "G2B")
    },
    "GENERAL PARTNERSHIP": {
        "B2B": ["Purchase of any assets"],
        "B2C": ["Purchase of any assets"],
    },
    "SOLE PROPRIETORSHIP": {
        "B2B": ["Sale of any assets (Sale deed)", "Franchisee agreement"],
        "B2C": ["Sale of any assets (Sale deed)", "Franchisee agreement"],
    },
    "ONE PERSON COMPANY": {
        "B2B": ["Franchisee agreement", "Commercialisation agreement"],
        "B2C": ["Franchisee agreement", "Commercialisation agreement"],
    },
    "GOVERNMENT ENTITY": {
        "G2B": list(_GOVERNMENT_CATEGORIES),
        "G2C": list(_GOVERNMENT_CATEGORIES),
        "G2G": list(_GOVERNMENT_CATEGORIES),
    },
    "INDIVIDUAL": {
        "i2i": ["Will documentation"],
        "i2m": ["Parent to children agreements"],
        "i2G": ["Individual to Government agreements"],
        **{
            tx: ["Commercialisation agreement"]
            for tx in ("C2E", "E2C", "B2E", "E2B", "G2E", "E2G", "E2E")
        },
    },
}

# Alternate spellings -> canonical organization key (compared after folding).
ORGANIZATION_ALIASES: dict[str, str] = {
    "LLP": "LIMITED LIABILITY PARTNERSHIP",
    "PRIVATE LIMITED": "PRIVATE LIMITED COMPANY",
    "PVT LTD": "PRIVATE LIMITED COMPANY",
    "PARTNERSHIP": "GENERAL PARTNERSHIP",
    "SOLE PROPRIETOR": "SOLE PROPRIETORSHIP",
    "OPC": "ONE PERSON COMPANY",
    "GOVERNMENT": "GOVERNMENT ENTITY",
}


def fold(value: str) -> str:
    """Case-insensitive, whitespace-collapsed comparison key."""
    return " ".join(value.replace("_", " ").split()).casefold()

