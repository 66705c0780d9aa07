# src/templates/assembler.py - v2
"""Deterministic template assembly.

Composition order is fixed: base skeleton, organization fragment,
transaction fragment, artifact-category fragment, then customization
substitutions. The fallback artifact is always a complete contract.
"""

from __future__ import annotations

import json
import re
from typing import Any

from scgen.core.models import GenerationRequest, TemplateAssembly
from scgen.templates import fragments
from scgen.templates.fragments import Fragment
from scgen.validation.content_validator import DEFAULT_PLACEHOLDER_MARKERS

_IDENT_RE = re.compile(r"[^A-Za-z0-9_]")
_ELEMENTARY_TYPE_RE = re.compile(r"(?:u?int|bytes|u?fixed)\d*(?:x\d+)?")
_MEMBER_DECL_RE = re.compile(r"\b(?:function|event|modifier|error|struct|enum)\s+([A-Za-z_]\w*)")
_STATE_DECL_RE = re.compile(
    r"^\s*(?:mapping\(.*?\)|[A-Za-z_][\w.]*(?:\[\w*\])*)\s+"
    r"(?:(?:public|private|internal|constant|immutable)\s+)*([A-Za-z_]\w*)\s*[=;]",
    re.MULTILINE,
)
_UINT256_MAX = 2**256 - 1

SOLIDITY_RESERVED: frozenset[str] = frozenset({
    "abstract", "address", "after", "alias", "anonymous", "apply", "as", "assembly", "auto",
    "bool", "break", "byte", "calldata", "case", "catch", "constant", "constructor",
    "continue", "contract", "copyof", "default", "define", "delete", "do", "else", "emit",
    "enum", "error", "event", "external", "fallback", "false", "final", "for", "function",
    "global", "if", "immutable", "implements", "import", "in", "indexed", "inline",
    "interface", "internal", "is", "let", "library", "macro", "mapping", "match", "memory",
    "modifier", "mutable", "new", "null", "of", "override", "partial", "payable", "pragma",
    "private", "promise", "public", "pure", "receive", "reference", "relocatable", "return",
    "returns", "revert", "sealed", "sizeof", "static", "storage", "string", "struct",
    "supports", "switch", "this", "super", "throw", "transient", "true", "try", "type",
    "typedef", "typeof", "unchecked", "unicode", "using", "var", "view", "virtual", "while",
    "wei", "gwei", "ether", "seconds", "minutes", "hours", "days", "weeks", "years",
    "block", "msg", "tx", "abi", "now", "selfdestruct", "keccak256", "sha256", "ripemd160",
    "ecrecover", "addmod", "mulmod", "gasleft", "blockhash", "require", "assert",
})

# Public and internal members of Ownable, ReentrancyGuard and Pausable.
INHERITED_MEMBERS: frozenset[str] = frozenset({
    "owner", "renounceOwnership", "transferOwnership", "_checkOwner", "_transferOwnership",
    "onlyOwner", "OwnershipTransferred", "OwnableUnauthorizedAccount", "OwnableInvalidOwner",
    "paused", "_pause", "_unpause", "_requireNotPaused", "_requirePaused", "whenNotPaused",
    "whenPaused", "Paused", "Unpaused", "EnforcedPause", "ExpectedPause",
    "nonReentrant", "_reentrancyGuardEntered", "ReentrancyGuardReentrantCall",
    "Ownable", "ReentrancyGuard", "Pausable", "Context", "_msgSender", "_msgData",
    "_contextSuffixLength",
})


class TemplateAssembler:
    """Builds the fallback artifact and prompt grounding for a request."""

    def __init__(self, schema_version: str = "0.8.20") -> None:
        self._schema_version = schema_version

    def assemble(self, request: GenerationRequest) -> TemplateAssembly:
        parts = self._fragments(request)
        taken = {contract_name(request)}
        for part in parts:
            taken |= declared_names(part.state) | declared_names(part.functions)
        customization_state = _customization_state(request.customizations, taken)
        return TemplateAssembly(
            fallback_artifact=self._render_artifact(request, parts, customization_state),
            grounding_context=_grounding_context(request, parts),
            fallback_analysis=_fallback_analysis(request, parts),
            fallback_risk_review=_fallback_risk_review(request, parts),
        )

    def _fragments(self, request: GenerationRequest) -> list[Fragment]:
        return [
            fragments.BASE,
            fragments.ORGANIZATION_FRAGMENTS.get(request.organization_type, fragments.EMPTY),
            fragments.TRANSACTION_FRAGMENTS.get(request.transaction_pattern, fragments.EMPTY),
            fragments.lookup_category(request.artifact_category),
        ]

    def _render_artifact(
        self,
        request: GenerationRequest,
        parts: list[Fragment],
        customization_state: str,
    ) -> str:
        name = contract_name(request)
        category = _solidity_string(request.artifact_category)

        state = "\n".join(p.state for p in parts if p.state)
        constructor = "".join(p.constructor for p in parts if p.constructor)
        functions = "\n".join(p.functions for p in parts if p.functions)

        lines = [
            fragments.HEADER.replace("{schema_version}", self._schema_version),
            "/**",
            f" * @title {name}",
            f" * @dev {category} for a {request.organization_type} "
            f"({request.transaction_pattern} transactions)",
            " */",
            f"contract {name} is Ownable, ReentrancyGuard, Pausable {{",
            state,
        ]
        if customization_state:
            lines.append(customization_state)
        lines.extend([
            "    constructor() Ownable(msg.sender) {",
            constructor.replace("{category}", category).rstrip("\n"),
            "    }",
            "",
            functions.rstrip("\n"),
            "}",
            "",
        ])
        return "\n".join(lines)


def contract_name(request: GenerationRequest) -> str:
    """Identifier-safe contract name from customizations or the category."""
    for key in ("contractName", "tokenName"):
        value = request.customizations.get(key)
        if isinstance(value, str) and value.strip():
            return _pascal_identifier(value)
    return _pascal_identifier(request.artifact_category)


def _pascal_identifier(text: str) -> str:
    words = re.findall(r"[A-Za-z0-9]+", text)
    name = "".join(w[:1].upper() + w[1:] for w in words) or "Agreement"
    if name[0].isdigit():
        name = f"C{name}"
    return name


def sanitize_identifier(key: str) -> str:
    """Turn an arbitrary customization key into a Solidity identifier."""
    ident = _IDENT_RE.sub("_", key.strip())
    if not ident.strip("_"):
        return "param"
    if ident[0].isdigit():
        ident = f"_{ident}"
    return ident


def declared_names(source: str) -> set[str]:
    """Functions, events, modifiers and state variables declared in a fragment."""
    return set(_MEMBER_DECL_RE.findall(source)) | set(_STATE_DECL_RE.findall(source))


def _is_reserved(ident: str) -> bool:
    return ident in SOLIDITY_RESERVED or _ELEMENTARY_TYPE_RE.fullmatch(ident) is not None


def _customization_state(customizations: dict[str, Any], taken: set[str]) -> str:
    """Typed public state variables, one per customization.

    Keywords and names already used by the contract or its OpenZeppelin bases
    get a ``custom_`` prefix.
    """
    seen = set(taken) | INHERITED_MEMBERS
    lines: list[str] = []
    for key, value in customizations.items():
        ident = sanitize_identifier(key)
        if ident in seen or _is_reserved(ident):
            ident = f"custom_{ident.lstrip('_')}"
        base, n = ident, 2
        while ident in seen:
            ident = f"{base}_{n}"
            n += 1
        seen.add(ident)
        sol_type, literal = _solidity_literal(value)
        lines.append(f"    {sol_type} public {ident} = {literal};")
    return "\n".join(lines)


def _solidity_literal(value: Any) -> tuple[str, str]:
    if isinstance(value, bool):
        return "bool", "true" if value else "false"
    if isinstance(value, int) and 0 <= value <= _UINT256_MAX:
        return "uint256", str(value)
    if isinstance(value, str):
        return "string", f'"{_solidity_string(value)}"'
    if isinstance(value, (dict, list)):
        text = json.dumps(value, sort_keys=True)
    else:
        text = str(value)
    return "string", f'"{_solidity_string(text)}"'


def _solidity_string(text: str) -> str:
    """Body of a plain (ASCII) Solidity string literal holding ``text``.

    Non-ASCII characters, braces and the first character of every placeholder
    marker are written as ``\\xNN`` escapes: the literal keeps the same bytes
    while the contract source stays free of markers and brace-balanced.
    """
    text = text.replace("\n", " ")
    # Per-character lowering keeps indexes aligned with the original.
    lowered = "".join(c.lower() if c.isascii() else c for c in text)
    marked: set[int] = set()
    for marker in DEFAULT_PLACEHOLDER_MARKERS:
        start = lowered.find(marker)
        while start != -1:
            marked.add(start)
            start = lowered.find(marker, start + 1)

    body = "".join(_escape_char(c, i in marked) for i, c in enumerate(text))
    if _contains_marker(body):
        # Hex digits of an escape can complete a marker; escape everything.
        body = "".join(_escape_char(c, True) for c in text)
    return body


def _escape_char(char: str, force: bool) -> str:
    if force or char in "{}" or not (char.isascii() and char.isprintable()):
        return "".join(f"\\x{b:02x}" for b in char.encode("utf-8"))
    if char in ('"', "\\"):
        return f"\\{char}"
    return char


def _contains_marker(text: str) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in DEFAULT_PLACEHOLDER_MARKERS)


def _grounding_context(request: GenerationRequest, parts: list[Fragment]) -> str:
    lines = [
        f"Organization type: {request.organization_type}",
        f"Transaction pattern: {request.transaction_pattern}",
        f"Artifact category: {request.artifact_category}",
        "Required features:",
    ]
    lines.extend(f"- {p.notes}" for p in parts if p.notes)
    if request.customizations:
        lines.append("Customizations:")
        lines.extend(
            f"- {k}: {json.dumps(v, sort_keys=True)}"
            for k, v in request.customizations.items()
        )
    return "\n".join(lines)


def _fallback_analysis(request: GenerationRequest, parts: list[Fragment]) -> str:
    features = " ".join(p.notes for p in parts if p.notes)
    return (
        f"Requirements analysis for a {request.artifact_category} contract "
        f"serving a {request.organization_type} in {request.transaction_pattern} "
        f"transactions. {features}"
    )


def _fallback_risk_review(request: GenerationRequest, parts: list[Fragment]) -> str:
    risks = [r for p in parts for r in p.risks]
    lines = [f"Risk review for {request.artifact_category}.", "", "Vulnerabilities:"]
    lines.extend(f"- {r}" for r in risks)
    lines.extend([
        "",
        "Recommendations:",
        "- Use a multisig or timelock as contract owner.",
        "- Commission an external audit before deployment.",
        "- Add unit tests covering every privileged function.",
    ])
    return "\n".join(lines)
